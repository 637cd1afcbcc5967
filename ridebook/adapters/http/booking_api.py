"""HTTP adapter for booking submission.

Combines the trip snapshot and the passenger's details into the backend's
booking request. Flight or train details are sent only when complete.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from pydantic import ValidationError as PayloadError

from ...domain.errors import BookingSubmissionError
from ...domain.models import PersonalDetails, TripParameters
from .api_client import BackendClient
from .fare_api import location_payload
from .schemas import BookingResponsePayload


def travel_information(details: PersonalDetails) -> Optional[Dict[str, Any]]:
    if details.flight is not None and details.flight.is_complete:
        return {
            "type": "flight",
            "details": {
                "type": "flight",
                "airline": details.flight.airline,
                "flightNumber": details.flight.flight_number,
                "scheduledDeparture": details.flight.scheduled_departure,
            },
        }
    if details.train is not None and details.train.is_complete:
        return {
            "type": "train",
            "details": {
                "type": "train",
                "trainOperator": details.train.train_operator,
                "trainNumber": details.train.train_number,
                "scheduledDeparture": details.train.scheduled_departure,
            },
        }
    return None


def build_booking_request(
    trip: TripParameters, details: PersonalDetails
) -> Dict[str, Any]:
    """Build the booking request body.

    Raises:
        BookingSubmissionError: If the trip is missing required information.
    """
    if trip.pickup is None or trip.dropoff is None:
        raise BookingSubmissionError("Pickup and dropoff locations are required")
    if trip.date is None or trip.time is None:
        raise BookingSubmissionError("Date and time are required")
    if trip.selected_vehicle is None:
        raise BookingSubmissionError("Vehicle selection is required")

    locations: Dict[str, Any] = {
        "pickup": location_payload(trip.pickup),
        "dropoff": location_payload(trip.dropoff),
    }
    if trip.stops:
        locations["additionalStops"] = [location_payload(s) for s in trip.stops]

    booking: Dict[str, Any] = {
        "locations": locations,
        "datetime": {
            "date": trip.date.isoformat(),
            "time": trip.time.strftime("%H:%M"),
        },
        "passengers": {
            "count": trip.passengers,
            "checkedLuggage": trip.checked_luggage,
            "handLuggage": trip.hand_luggage,
        },
        "vehicle": {
            "id": trip.selected_vehicle.id,
            "name": trip.selected_vehicle.name,
        },
        "specialRequests": details.special_requests,
    }
    travel = travel_information(details)
    if travel is not None:
        booking["travelInformation"] = travel

    return {
        "customer": {
            "fullName": details.full_name,
            "email": details.email,
            # backend validation rejects spaces in phone numbers
            "phoneNumber": re.sub(r"\s+", "", details.phone),
        },
        "booking": booking,
    }


@dataclass
class HttpBookingAdapter:
    """BookingSubmissionPort over the backend's enhanced booking endpoint."""

    client: BackendClient

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    async def submit(self, trip: TripParameters, details: PersonalDetails) -> str:
        payload = build_booking_request(trip, details)
        data = await self.client.post(
            self.client.config.booking_path, payload, error_type=BookingSubmissionError
        )
        try:
            response = BookingResponsePayload.model_validate(data)
        except PayloadError as e:
            self._logger.warning(
                "Malformed booking response", extra={"errors": e.error_count()}
            )
            raise BookingSubmissionError(
                "Invalid response format from server", cause=e
            )
        return response.booking_id
