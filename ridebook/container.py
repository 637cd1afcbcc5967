"""Dependency injection container.

This module provides a simple DI container without external frameworks.
It wires ports to adapters and builds the booking orchestrator.

Design principles:
1. No magic - explicit registration and resolution
2. Testable - easy to swap implementations
3. Lazy loading - adapters instantiated on first use
4. Thread-safe - for web server contexts
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, TypeVar

from .config import AppConfig, get_config

T = TypeVar("T")


@dataclass
class Container:
    """Dependency injection container.

    Usage:
        # Production
        container = Container.create_default()
        wizard = container.resolve(BookingOrchestrator)

        # Testing
        container = Container()
        container.register(FarePricingPort, lambda: FakePricing())
        pricing = container.resolve(FarePricingPort)

    Attributes:
        config: Application configuration
    """

    config: AppConfig = field(default_factory=get_config)

    _factories: Dict[type[Any], Callable[[], Any]] = field(
        default_factory=dict, repr=False
    )
    _singletons: Dict[type[Any], Any] = field(default_factory=dict, repr=False)
    _singleton_types: set[type[Any]] = field(default_factory=set, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    def register(
        self,
        port_type: type[Any],
        factory: Callable[[], Any],
        singleton: bool = True,
    ) -> None:
        """Register a factory for a port type.

        Args:
            port_type: The type (usually a Protocol) to register.
            factory: A callable that creates instances of the type.
            singleton: If True, only one instance is created.
        """
        with self._lock:
            self._factories[port_type] = factory
            if singleton:
                self._singleton_types.add(port_type)
            else:
                self._singleton_types.discard(port_type)
            self._singletons.pop(port_type, None)

    def resolve(self, port_type: type[Any]) -> Any:
        """Resolve an instance of a port type.

        Raises:
            KeyError: If the type is not registered.
        """
        with self._lock:
            if port_type not in self._factories:
                raise KeyError(f"Type not registered: {port_type}")

            if port_type in self._singleton_types:
                if port_type not in self._singletons:
                    self._singletons[port_type] = self._factories[port_type]()
                return self._singletons[port_type]

            return self._factories[port_type]()

    def is_registered(self, port_type: type[Any]) -> bool:
        return port_type in self._factories

    def clear_singletons(self) -> None:
        """Clear all cached singletons.

        Call this in tests to ensure fresh instances.
        """
        with self._lock:
            self._singletons.clear()

    async def aclose(self) -> None:
        """Close cached singletons that own network resources.

        Singletons are dropped, so later resolves build fresh instances.
        """
        with self._lock:
            instances = list(self._singletons.values())
            self._singletons.clear()
        for instance in instances:
            close = getattr(instance, "aclose", None)
            if close is not None:
                await close()

    def clear_all(self) -> None:
        """Clear all registrations and singletons."""
        with self._lock:
            self._factories.clear()
            self._singletons.clear()
            self._singleton_types.clear()

    @classmethod
    def create_default(cls, config: Optional[AppConfig] = None) -> Container:
        """Create a container with default production bindings.

        Args:
            config: Optional configuration override.

        Returns:
            A configured Container instance.
        """
        from .adapters.cache import TTLCache
        from .adapters.geocoding import NominatimGeocoderAdapter
        from .adapters.geolocation import IpGeolocationAdapter, StaticGeolocationAdapter
        from .adapters.http import BackendClient, HttpBookingAdapter, HttpFarePricingAdapter
        from .adapters.storage import InMemoryStorage, JsonFileStorage
        from .ports.booking import BookingSubmissionPort
        from .ports.cache import CachePort
        from .ports.geocoding import GeocoderPort
        from .ports.geolocation import GeolocationPort
        from .ports.pricing import FarePricingPort
        from .ports.storage import StateStoragePort
        from .services import BookingOrchestrator, BookingStatePersistence

        config = config or get_config()
        container = cls(config=config)

        # Suggestion cache
        container.register(
            CachePort,
            lambda: TTLCache(
                name="geocode",
                ttl_seconds=config.geocoding.cache_ttl_seconds,
                max_size=config.geocoding.cache_max_size,
            ),
        )

        # Geocoding
        container.register(
            GeocoderPort,
            lambda: NominatimGeocoderAdapter(
                config.geocoding,
                container.resolve(CachePort),
                max_results=config.search.max_results,
            ),
        )

        # Geolocation based on config
        def create_geolocation() -> GeolocationPort:
            if config.geolocation.provider == "ip":
                return IpGeolocationAdapter(config.geolocation)
            return StaticGeolocationAdapter(config.geolocation)

        container.register(GeolocationPort, create_geolocation)

        # Backend
        container.register(BackendClient, lambda: BackendClient(config.backend))
        container.register(
            FarePricingPort,
            lambda: HttpFarePricingAdapter(container.resolve(BackendClient)),
        )
        container.register(
            BookingSubmissionPort,
            lambda: HttpBookingAdapter(container.resolve(BackendClient)),
        )

        # Session storage
        def create_storage() -> StateStoragePort:
            if config.persistence.enabled:
                return JsonFileStorage(config.persistence.directory)
            return InMemoryStorage()

        container.register(StateStoragePort, create_storage)

        # Wizard facade, one per session
        def create_orchestrator() -> BookingOrchestrator:
            persistence = None
            if config.persistence.enabled:
                persistence = BookingStatePersistence(
                    container.resolve(StateStoragePort), config.persistence
                )
            return BookingOrchestrator(
                pricing=container.resolve(FarePricingPort),
                booking=container.resolve(BookingSubmissionPort),
                geocoder=container.resolve(GeocoderPort),
                geolocation=container.resolve(GeolocationPort),
                config=config,
                persistence=persistence,
            )

        container.register(BookingOrchestrator, create_orchestrator, singleton=False)

        return container


# Global default container (lazy initialized)
_default_container: Optional[Container] = None
_container_lock = threading.Lock()


def get_container() -> Container:
    """Get the default application container.

    Returns:
        The default Container instance (creates one if needed).
    """
    global _default_container
    if _default_container is None:
        with _container_lock:
            if _default_container is None:
                _default_container = Container.create_default()
    return _default_container


def reset_container() -> None:
    """Reset the default container.

    Call this in tests to ensure a fresh container.
    """
    global _default_container
    with _container_lock:
        if _default_container is not None:
            _default_container.clear_all()
        _default_container = None
