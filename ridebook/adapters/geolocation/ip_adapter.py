"""Approximate geolocation from the public IP address.

Queries an ip-api.com compatible endpoint. The position is coarse (city
level), so the reported accuracy is a fixed few kilometers.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

import httpx

from ...config import GeolocationConfig, get_config
from ...domain.errors import GeolocationError
from ...domain.models import DevicePosition

IP_ACCURACY_METERS = 5000.0


@dataclass
class IpGeolocationAdapter:
    """GeolocationPort backed by an IP lookup service.

    Attributes:
        config: Geolocation configuration
        transport: Optional httpx transport (tests use httpx.MockTransport)
    """

    config: GeolocationConfig = field(default_factory=lambda: get_config().geolocation)
    transport: Optional[httpx.AsyncBaseTransport] = None

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    async def current_position(self) -> DevicePosition:
        try:
            async with httpx.AsyncClient(
                timeout=self.config.timeout_seconds, transport=self.transport
            ) as client:
                response = await client.get(self.config.ip_lookup_url)
                response.raise_for_status()
                data = response.json()
        except httpx.TimeoutException as e:
            raise GeolocationError(
                "Timed out while locating the device", reason="timeout", cause=e
            )
        except httpx.HTTPStatusError as e:
            if e.response.status_code in (401, 403):
                raise GeolocationError(
                    "Location lookup was refused", reason="permission-denied", cause=e
                )
            raise GeolocationError(
                "Location lookup failed", reason="unavailable", cause=e
            )
        except (httpx.RequestError, ValueError) as e:
            raise GeolocationError(
                "Location lookup failed", reason="unavailable", cause=e
            )

        if not isinstance(data, dict):
            data = {}
        if data.get("status", "success") != "success" or "lat" not in data:
            self._logger.warning(
                "IP lookup returned no position", extra={"response": data}
            )
            raise GeolocationError(
                data.get("message") or "Location unavailable", reason="unavailable"
            )

        return DevicePosition(
            latitude=float(data["lat"]),
            longitude=float(data["lon"]),
            accuracy=IP_ACCURACY_METERS,
        )
