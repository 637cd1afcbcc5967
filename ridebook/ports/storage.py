"""Storage port - Round-trip persistence of serialized wizard state.

Only the contract matters here: a string blob saved under a key must come
back unchanged from load() until it is removed.
"""

from __future__ import annotations

from typing import Optional, Protocol


class StateStoragePort(Protocol):
    """Port for session storage.

    Implementations:
    - adapters/storage/json_file_storage.py (JsonFileStorage) - Production
    - adapters/storage/memory_storage.py (InMemoryStorage) - Testing
    """

    def load(self, key: str) -> Optional[str]:
        """Return the blob stored under key, or None."""
        ...

    def save(self, key: str, value: str) -> None:
        """Store a blob under key, replacing any previous value."""
        ...

    def remove(self, key: str) -> None:
        """Delete the blob under key if present."""
        ...
