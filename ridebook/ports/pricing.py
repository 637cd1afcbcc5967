"""Pricing port - Abstraction for the remote fare estimation service."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ..domain.models import FareQuote, TripParameters


class FarePricingPort(Protocol):
    """Port for fare estimation.

    Implementation: adapters/http/fare_api.py

    The pricing algorithm runs server-side; this port only ships a trip
    snapshot and returns the priced vehicle options.
    """

    async def estimate(self, trip: TripParameters) -> FareQuote:
        """Request a fare quote for a trip.

        Args:
            trip: Snapshot of the trip parameters (never a live reference).

        Returns:
            FareQuote with vehicle options and journey metrics. The
            version field is stamped by the caller.

        Raises:
            FareEstimationError: On transport failure, timeout or an
                error response.
        """
        ...
