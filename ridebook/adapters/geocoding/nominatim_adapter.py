"""Nominatim geocoder adapter.

Wraps geopy's Nominatim client with:
- Suggestion caching via CachePort
- Configuration injection
- Rate limiting
- Typed errors (GeocodingError) instead of silent None returns

geopy is synchronous, so calls run in a worker thread to keep the event
loop free while a lookup is outstanding.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from geopy.exc import GeocoderRateLimited, GeopyError
from geopy.extra.rate_limiter import RateLimiter
from geopy.geocoders import Nominatim

from ...config import GeocodingConfig, get_config
from ...domain.errors import GeocodingError
from ...domain.models import Coordinates, SearchCategory, SearchResult
from ...ports.cache import CachePort
from ..cache.memory_cache import TTLCache


def _default_cache() -> TTLCache[tuple[SearchResult, ...]]:
    config = get_config().geocoding
    return TTLCache(
        name="geocode",
        ttl_seconds=config.cache_ttl_seconds,
        max_size=config.cache_max_size,
    )


def categorize(raw: dict[str, Any]) -> SearchCategory:
    """Map a Nominatim place class/type to a suggestion category."""
    place_class = raw.get("class") or raw.get("category") or ""
    place_type = raw.get("type") or ""
    if place_class == "aeroway" and place_type in {"aerodrome", "terminal"}:
        return SearchCategory.AIRPORT
    if place_type in {"station", "train_station", "halt"} and place_class in {
        "railway",
        "building",
        "public_transport",
    }:
        return SearchCategory.TRAIN_STATION
    return SearchCategory.ADDRESS


def to_search_result(location: Any) -> SearchResult:
    """Convert a geopy Location into a SearchResult."""
    raw = location.raw or {}
    display = str(location.address or raw.get("display_name", ""))
    label, _, secondary = display.partition(", ")
    place_id = raw.get("place_id") or f"{raw.get('osm_type', '')}{raw.get('osm_id', '')}"
    return SearchResult(
        id=str(place_id),
        label=label or display,
        coordinates=Coordinates(
            latitude=float(location.latitude),
            longitude=float(location.longitude),
        ),
        category=categorize(raw),
        secondary_label=secondary,
    )


@dataclass
class NominatimGeocoderAdapter:
    """Nominatim geocoder adapter with caching and rate limiting.

    Implements GeocoderPort using OpenStreetMap's Nominatim service.

    Attributes:
        config: Geocoding configuration
        cache: Cache for suggestion lists
        max_results: Maximum suggestions per query
    """

    config: GeocodingConfig = field(default_factory=lambda: get_config().geocoding)
    cache: CachePort[tuple[SearchResult, ...]] = field(default_factory=_default_cache)
    max_results: int = 8

    _geolocator: Optional[Nominatim] = field(default=None, repr=False)
    _geocode_fn: Optional[Any] = field(default=None, repr=False)
    _reverse_fn: Optional[Any] = field(default=None, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def _get_geolocator(self) -> Nominatim:
        """Get or initialize the rate-limited geocoder."""
        if self._geolocator is not None:
            return self._geolocator

        self._logger.debug(
            "Initializing Nominatim geocoder",
            extra={
                "user_agent": self.config.user_agent,
                "timeout": self.config.timeout_seconds,
            },
        )

        self._geolocator = Nominatim(
            user_agent=self.config.user_agent,
            timeout=self.config.timeout_seconds,
        )
        limiter_options = dict(
            min_delay_seconds=self.config.rate_limit_delay,
            max_retries=self.config.max_retries,
            error_wait_seconds=self.config.error_wait_seconds,
            swallow_exceptions=False,
        )
        self._geocode_fn = RateLimiter(self._geolocator.geocode, **limiter_options)
        self._reverse_fn = RateLimiter(self._geolocator.reverse, **limiter_options)
        return self._geolocator

    def _search_sync(self, query: str) -> tuple[SearchResult, ...]:
        self._get_geolocator()
        assert self._geocode_fn is not None

        locations = self._geocode_fn(
            query,
            exactly_one=False,
            limit=self.max_results,
            addressdetails=True,
            language=self.config.language,
            country_codes=self.config.country_codes,
        )
        return tuple(to_search_result(loc) for loc in locations or ())

    async def search(self, query: str) -> Sequence[SearchResult]:
        """Look up address suggestions.

        Args:
            query: Free text typed by the user.

        Returns:
            Suggestions in Nominatim's ranking order.

        Raises:
            GeocodingError: If the service failed or rate limited us.
        """
        query = query.strip()
        if not query:
            return ()

        cache_key = f"{query.lower()}:{self.config.language}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            self._logger.debug("Geocode cache hit", extra={"query": query})
            return cached

        try:
            results = await asyncio.to_thread(self._search_sync, query)
        except GeocoderRateLimited as e:
            self._logger.warning("Geocode rate limited", extra={"query": query})
            raise GeocodingError(
                "Address search is busy, please try again",
                query=query,
                is_rate_limited=True,
                cause=e,
            )
        except GeopyError as e:
            self._logger.warning(
                "Geocode service error", extra={"query": query, "error": str(e)}
            )
            raise GeocodingError("Address search failed", query=query, cause=e)

        self._logger.debug(
            "Geocode success", extra={"query": query, "results": len(results)}
        )
        self.cache.set(cache_key, results)
        return results

    def _reverse_sync(self, latitude: float, longitude: float) -> Optional[str]:
        self._get_geolocator()
        assert self._reverse_fn is not None

        result = self._reverse_fn(
            (latitude, longitude),
            language=self.config.language,
            addressdetails=True,
        )
        if result is None:
            return None
        return str(result.address)

    async def reverse(self, latitude: float, longitude: float) -> Optional[str]:
        """Reverse geocode coordinates to a display address.

        Failures are logged and reported as "no address known".
        """
        try:
            return await asyncio.to_thread(self._reverse_sync, latitude, longitude)
        except GeopyError as e:
            self._logger.warning(
                "Reverse geocode failed",
                extra={"lat": latitude, "lon": longitude, "error": str(e)},
            )
            return None
