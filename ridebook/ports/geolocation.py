"""Geolocation port - Abstraction for the device position."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ..domain.models import DevicePosition


class GeolocationPort(Protocol):
    """Port for the device geolocation capability.

    Implementations:
    - adapters/geolocation/static_adapter.py (StaticGeolocationAdapter)
    - adapters/geolocation/ip_adapter.py (IpGeolocationAdapter)
    """

    async def current_position(self) -> DevicePosition:
        """Resolve the current device position.

        Returns:
            Latitude, longitude and accuracy in meters.

        Raises:
            GeolocationError: Permission denied, unavailable or timed out.
        """
        ...
