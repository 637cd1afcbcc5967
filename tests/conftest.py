"""Shared fixtures and fakes for the booking wizard tests."""

from __future__ import annotations

import asyncio
import datetime as dt
from typing import Any, List, Optional, Sequence

import pytest

from ridebook.config import AddressSearchConfig, AppConfig, reset_config
from ridebook.domain.models import (
    DevicePosition,
    FareQuote,
    JourneyMetrics,
    Location,
    PersonalDetails,
    SearchResult,
    VehicleCapacity,
    VehicleOption,
    VehiclePrice,
)

HEATHROW = Location(51.4700, -0.4543, "Heathrow Airport", id="heathrow")
KINGS_CROSS = Location(51.5302, -0.1229, "King's Cross Station", id="kings-cross")
GATWICK = Location(51.1537, -0.1821, "Gatwick Airport", id="gatwick")
WESTMINSTER = Location(51.4994, -0.1269, "Westminster", id="westminster")


def make_vehicle(vehicle_id: str, amount: float = 45.0, seats: int = 4) -> VehicleOption:
    return VehicleOption(
        id=vehicle_id,
        name=vehicle_id.title(),
        capacity=VehicleCapacity(passengers=seats, luggage=2),
        price=VehiclePrice(amount=amount),
    )


def make_quote(*vehicle_ids: str, distance: float = 15.2) -> FareQuote:
    return FareQuote(
        vehicle_options=tuple(make_vehicle(v) for v in vehicle_ids),
        journey=JourneyMetrics(distance_miles=distance, duration_minutes=42),
    )


VALID_DETAILS = PersonalDetails(
    full_name="Alex Morgan",
    email="alex@example.com",
    phone="+44 207 946 0958",
)


class Deferred:
    """Async collaborator whose calls stay pending until the test settles them."""

    def __init__(self) -> None:
        self.calls: List[tuple[Any, ...]] = []
        self._futures: List[asyncio.Future] = []

    async def _wait(self, *args: Any) -> Any:
        self.calls.append(args)
        future = asyncio.get_running_loop().create_future()
        self._futures.append(future)
        return await future

    def resolve(self, index: int, value: Any) -> None:
        self._futures[index].set_result(value)

    def fail(self, index: int, error: BaseException) -> None:
        self._futures[index].set_exception(error)


class DeferredPricing(Deferred):
    async def estimate(self, trip):
        return await self._wait(trip)


class DeferredBooking(Deferred):
    async def submit(self, trip, details):
        return await self._wait(trip, details)


class DeferredGeocoder(Deferred):
    def __init__(self, address: Optional[str] = "10 Downing Street, London") -> None:
        super().__init__()
        self.address = address

    async def search(self, query: str) -> Sequence[SearchResult]:
        return await self._wait(query)

    async def reverse(self, latitude: float, longitude: float) -> Optional[str]:
        return self.address


class FixedGeolocation:
    def __init__(self, position: Optional[DevicePosition] = None, error=None) -> None:
        self.position = position or DevicePosition(51.5034, -0.1276, accuracy=20)
        self.error = error
        self.calls = 0

    async def current_position(self) -> DevicePosition:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.position


async def settle() -> None:
    """Let every ready task run until the loop is idle."""
    for _ in range(5):
        await asyncio.sleep(0)


@pytest.fixture(autouse=True)
def fresh_config():
    """Isolate tests from cached configuration."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def app_config() -> AppConfig:
    return AppConfig(search=AddressSearchConfig(debounce_seconds=0.01))


@pytest.fixture
def tomorrow() -> dt.date:
    return dt.date.today() + dt.timedelta(days=1)
