"""Geolocation from a configured position.

Useful on kiosks and servers where the device position is fixed, and in
tests. With no position configured every lookup fails as "unavailable".
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ...config import GeolocationConfig, get_config
from ...domain.errors import GeolocationError
from ...domain.models import DevicePosition


@dataclass
class StaticGeolocationAdapter:
    """GeolocationPort returning the configured coordinates."""

    config: GeolocationConfig = field(default_factory=lambda: get_config().geolocation)

    async def current_position(self) -> DevicePosition:
        if self.config.latitude is None or self.config.longitude is None:
            raise GeolocationError(
                "Geolocation is not supported on this device", reason="unavailable"
            )
        return DevicePosition(
            latitude=self.config.latitude,
            longitude=self.config.longitude,
            accuracy=self.config.accuracy_meters,
        )
