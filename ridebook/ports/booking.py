"""Booking port - Abstraction for the remote booking submission service."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ..domain.models import PersonalDetails, TripParameters


class BookingSubmissionPort(Protocol):
    """Port for booking submission.

    Implementation: adapters/http/booking_api.py
    """

    async def submit(self, trip: TripParameters, details: PersonalDetails) -> str:
        """Create a booking.

        Args:
            trip: Snapshot of the trip parameters, vehicle included.
            details: Contact details of the passenger.

        Returns:
            The booking id assigned by the backend.

        Raises:
            BookingSubmissionError: On transport failure or an error response.
        """
        ...
