"""Wire schemas for the pricing and booking backend.

Pydantic models validate backend JSON before it becomes domain
dataclasses, so a malformed response fails in one place with a clear
message instead of deep inside the stores.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ...domain.models import (
    FareQuote,
    JourneyMetrics,
    PriceBreakdown,
    VehicleCapacity,
    VehicleOption,
    VehiclePrice,
    VehicleType,
)


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )


class PriceBreakdownPayload(CamelModel):
    base_fare: float = 0.0
    distance_charge: float = 0.0
    additional_stop_fee: float = 0.0
    time_multiplier: float = 1.0
    special_location_fees: float = 0.0
    waiting_charge: float = 0.0


class PricePayload(CamelModel):
    amount: float
    currency: str = "GBP"
    breakdown: Optional[PriceBreakdownPayload] = None


class CapacityPayload(CamelModel):
    passengers: int
    luggage: int


class VehicleOptionPayload(CamelModel):
    id: str
    name: str
    description: str = ""
    capacity: CapacityPayload
    price: PricePayload
    eta: Optional[int] = None
    image_url: Optional[str] = None
    features: List[str] = Field(default_factory=list)
    vehicle_type: Optional[str] = None

    def to_domain(self) -> VehicleOption:
        breakdown = self.price.breakdown
        try:
            vehicle_type = VehicleType(self.vehicle_type) if self.vehicle_type else None
        except ValueError:
            vehicle_type = None
        return VehicleOption(
            id=self.id,
            name=self.name,
            description=self.description,
            capacity=VehicleCapacity(
                passengers=self.capacity.passengers, luggage=self.capacity.luggage
            ),
            price=VehiclePrice(
                amount=self.price.amount,
                currency=self.price.currency,
                breakdown=PriceBreakdown(**breakdown.model_dump()) if breakdown else None,
            ),
            eta=self.eta,
            image_url=self.image_url,
            features=tuple(self.features),
            vehicle_type=vehicle_type,
        )


class JourneyPayload(BaseModel):
    """Journey metrics; the backend sends these keys in snake_case."""

    model_config = ConfigDict(extra="ignore")

    distance_miles: float = 0.0
    duration_minutes: float = 0.0


class FareResponsePayload(CamelModel):
    vehicle_options: List[VehicleOptionPayload]
    journey: JourneyPayload = Field(default_factory=JourneyPayload)
    notifications: List[str] = Field(default_factory=list)

    def to_domain(self) -> FareQuote:
        return FareQuote(
            vehicle_options=tuple(v.to_domain() for v in self.vehicle_options),
            journey=JourneyMetrics(
                distance_miles=self.journey.distance_miles,
                duration_minutes=self.journey.duration_minutes,
            ),
            notifications=tuple(self.notifications),
        )


class BookingResponsePayload(CamelModel):
    booking_id: str
    message: str = ""
