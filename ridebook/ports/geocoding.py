"""Geocoding port - Abstraction for address suggestions and coordinates.

This protocol defines the contract for geocoding services, allowing
different implementations (Nominatim, Mapbox, etc.) to be used.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Protocol, Sequence

if TYPE_CHECKING:
    from ..domain.models import SearchResult


class GeocoderPort(Protocol):
    """Port for geocoding services.

    Implementation: adapters/geocoding/nominatim_adapter.py
    """

    async def search(self, query: str) -> Sequence[SearchResult]:
        """Look up ranked address suggestions for a query.

        Args:
            query: Free text typed by the user (e.g., "Heathrow", "SW1A 1AA").

        Returns:
            Suggestions in ranking order.

        Raises:
            GeocodingError: If the service is unreachable or failed.
        """
        ...

    async def reverse(self, latitude: float, longitude: float) -> Optional[str]:
        """Reverse geocode coordinates to a display address.

        Args:
            latitude: Latitude in degrees.
            longitude: Longitude in degrees.

        Returns:
            A formatted address, or None if nothing is known there.
        """
        ...
