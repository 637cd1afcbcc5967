"""HTTP adapter for fare estimation.

Serializes a trip snapshot into the backend's fare request and parses the
priced vehicle options. The response may come bare or wrapped as
``{"success": true, "data": {"fare": {...}}}``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict

from pydantic import ValidationError as PayloadError

from ...domain.errors import FareEstimationError
from ...domain.models import FareQuote, Location, TripParameters
from .api_client import BackendClient
from .schemas import FareResponsePayload


def location_payload(location: Location) -> Dict[str, Any]:
    return {
        "address": location.address,
        "coordinates": {"lat": location.latitude, "lng": location.longitude},
    }


def build_fare_request(trip: TripParameters) -> Dict[str, Any]:
    """Build the fare request body for a complete trip snapshot.

    Raises:
        FareEstimationError: If pickup, dropoff, date or time is missing.
    """
    if trip.pickup is None or trip.dropoff is None:
        raise FareEstimationError("Pickup and dropoff addresses are required")
    if trip.date is None or trip.time is None:
        raise FareEstimationError("Please specify pickup date and time")

    locations: Dict[str, Any] = {
        "pickup": location_payload(trip.pickup),
        "dropoff": location_payload(trip.dropoff),
    }
    if trip.stops:
        locations["additionalStops"] = [location_payload(s) for s in trip.stops]

    return {
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
    }


@dataclass
class HttpFarePricingAdapter:
    """FarePricingPort over the backend's enhanced fare endpoint."""

    client: BackendClient

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    async def estimate(self, trip: TripParameters) -> FareQuote:
        payload = build_fare_request(trip)
        data = await self.client.post(
            self.client.config.fare_path, payload, error_type=FareEstimationError
        )
        fare = data.get("fare", data)
        if not fare:
            raise FareEstimationError("No fare data received from server")

        try:
            quote = FareResponsePayload.model_validate(fare).to_domain()
        except PayloadError as e:
            self._logger.warning(
                "Malformed fare response", extra={"errors": e.error_count()}
            )
            raise FareEstimationError("Invalid response format from server", cause=e)

        self._logger.debug(
            "Fare response parsed",
            extra={
                "options": len(quote.vehicle_options),
                "distance_miles": quote.journey.distance_miles,
            },
        )
        return quote
