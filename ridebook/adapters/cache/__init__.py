"""Cache adapters - Implementations of the CachePort."""

from .memory_cache import TTLCache

__all__ = ["TTLCache"]
