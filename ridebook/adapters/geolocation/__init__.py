"""Geolocation adapters - Implementations of GeolocationPort.

Available implementations:
- StaticGeolocationAdapter: fixed, configured position
- IpGeolocationAdapter: coarse position from an IP lookup service
"""

from .ip_adapter import IpGeolocationAdapter
from .static_adapter import StaticGeolocationAdapter

__all__ = ["StaticGeolocationAdapter", "IpGeolocationAdapter"]
