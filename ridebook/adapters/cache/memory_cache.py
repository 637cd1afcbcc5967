"""In-memory TTL cache for geocoding suggestions.

Entries expire after a fixed time-to-live and the oldest entry is evicted
once max_size is reached. Expiry uses a monotonic clock.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, Optional, Tuple, TypeVar

T = TypeVar("T")


@dataclass
class TTLCache(Generic[T]):
    """Thread-safe in-memory cache with a TTL and a size bound.

    The geocoding adapter calls it from worker threads, hence the lock.

    Attributes:
        ttl_seconds: Lifetime of an entry (None = no expiry)
        max_size: Maximum number of entries (None = unlimited)
        name: Cache name for logging
        clock: Time source, injectable for tests

    Example:
        cache = TTLCache[list](name="geocode", ttl_seconds=300)
        cache.set("heathrow", results)
    """

    ttl_seconds: Optional[float] = None
    max_size: Optional[int] = None
    name: str = "cache"
    clock: Callable[[], float] = time.monotonic

    _store: "OrderedDict[str, Tuple[Any, float]]" = field(
        default_factory=OrderedDict, repr=False
    )
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)
    _hits: int = field(default=0, repr=False)
    _misses: int = field(default=0, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(f"cache.{self.name}")

    def get(self, key: str) -> Optional[T]:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                self._misses += 1
                return None

            value, expires_at = entry
            if self.clock() >= expires_at:
                del self._store[key]
                self._logger.debug("Cache entry expired", extra={"key": key})
                self._misses += 1
                return None

            self._hits += 1
            return value

    def set(self, key: str, value: T) -> None:
        with self._lock:
            if key in self._store:
                del self._store[key]
            elif self.max_size is not None and len(self._store) >= self.max_size:
                evicted, _ = self._store.popitem(last=False)
                self._logger.debug("Cache evicted entry", extra={"key": evicted})

            expires_at = (
                self.clock() + self.ttl_seconds
                if self.ttl_seconds is not None
                else float("inf")
            )
            self._store[key] = (value, expires_at)

    def clear(self) -> int:
        with self._lock:
            count = len(self._store)
            self._store.clear()
            self._hits = 0
            self._misses = 0
            self._logger.info("Cache cleared", extra={"entries_cleared": count})
            return count

    def stats(self) -> Dict[str, Any]:
        """Return hit/miss counts and size."""
        with self._lock:
            total = self._hits + self._misses
            hit_rate = (self._hits / total * 100) if total > 0 else 0.0
            return {
                "size": len(self._store),
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate_percent": round(hit_rate, 1),
            }
