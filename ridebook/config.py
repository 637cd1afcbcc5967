"""Centralized configuration using Pydantic Settings.

This module is the single source of truth for tunables of the booking
wizard: passenger and luggage limits, search debounce, backend endpoints,
geolocation, persistence and logging.

Configuration can be overridden via environment variables:
- RIDEBOOK_TRIP_MAX_PASSENGERS=16
- RIDEBOOK_SEARCH_DEBOUNCE_SECONDS=0.5
- RIDEBOOK_API_BASE_URL=https://api.example.com
- etc.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class TripLimitsConfig(BaseSettings):
    """Clamping ranges for numeric trip parameters.

    Environment variables prefixed with RIDEBOOK_TRIP_.
    """

    model_config = SettingsConfigDict(env_prefix="RIDEBOOK_TRIP_")

    min_passengers: int = 1
    max_passengers: int = 8
    min_luggage: int = 0
    max_luggage: int = 8


class AddressSearchConfig(BaseSettings):
    """Address search behavior.

    Environment variables prefixed with RIDEBOOK_SEARCH_.
    """

    model_config = SettingsConfigDict(env_prefix="RIDEBOOK_SEARCH_")

    min_query_length: int = 3
    debounce_seconds: float = 0.3
    max_results: int = 8
    max_recent: int = 5
    include_current_location: bool = True


class GeocodingConfig(BaseSettings):
    """Geocoding configuration.

    Environment variables prefixed with RIDEBOOK_GEO_.
    """

    model_config = SettingsConfigDict(env_prefix="RIDEBOOK_GEO_")

    user_agent: str = "ridebook"
    language: str = "en"
    country_codes: Optional[str] = "gb"
    timeout_seconds: int = 10
    rate_limit_delay: float = 1.0
    max_retries: int = 2
    error_wait_seconds: float = 2.0
    cache_ttl_seconds: float = 300.0
    cache_max_size: int = 256


class BackendConfig(BaseSettings):
    """Pricing and booking backend.

    Environment variables prefixed with RIDEBOOK_API_.
    """

    model_config = SettingsConfigDict(env_prefix="RIDEBOOK_API_")

    base_url: str = "http://localhost:5555"
    timeout_seconds: float = 30.0
    fare_path: str = "/api/fare-estimate/enhanced"
    booking_path: str = "/api/bookings/create-enhanced"


class GeolocationConfig(BaseSettings):
    """Device geolocation source.

    Environment variables prefixed with RIDEBOOK_GEOLOCATION_.
    """

    model_config = SettingsConfigDict(env_prefix="RIDEBOOK_GEOLOCATION_")

    provider: Literal["static", "ip"] = "static"
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    accuracy_meters: float = 50.0
    timeout_seconds: float = 5.0
    ip_lookup_url: str = "http://ip-api.com/json/"


class PersistenceConfig(BaseSettings):
    """Session persistence of trip parameters and the last fare quote.

    Environment variables prefixed with RIDEBOOK_STORE_.
    """

    model_config = SettingsConfigDict(env_prefix="RIDEBOOK_STORE_")

    enabled: bool = False
    directory: Path = Field(default_factory=lambda: Path.home() / ".ridebook")
    trip_key: str = "bookingData"
    fare_key: str = "fareData"


class ObservabilityConfig(BaseSettings):
    """Logging and observability configuration.

    Environment variables prefixed with RIDEBOOK_LOG_.
    """

    model_config = SettingsConfigDict(env_prefix="RIDEBOOK_LOG_")

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    structured: bool = False  # Set True for JSON logging


class AppConfig(BaseSettings):
    """Main application configuration aggregating all sub-configs.

        config = get_config()
        print(config.trip.max_passengers)
        print(config.backend.base_url)

    Environment variables prefixed with RIDEBOOK_.
    """

    model_config = SettingsConfigDict(env_prefix="RIDEBOOK_")

    trip: TripLimitsConfig = Field(default_factory=TripLimitsConfig)
    search: AddressSearchConfig = Field(default_factory=AddressSearchConfig)
    geocoding: GeocodingConfig = Field(default_factory=GeocodingConfig)
    backend: BackendConfig = Field(default_factory=BackendConfig)
    geolocation: GeolocationConfig = Field(default_factory=GeolocationConfig)
    persistence: PersistenceConfig = Field(default_factory=PersistenceConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Get the singleton application configuration.

    Configuration is loaded once and cached. To reload configuration
    (e.g., in tests), use reset_config() first.

    Returns:
        The application configuration instance.
    """
    return AppConfig()


def reset_config() -> None:
    """Reset the configuration cache."""
    get_config.cache_clear()
