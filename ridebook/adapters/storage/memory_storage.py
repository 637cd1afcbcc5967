"""In-memory session storage for tests and ephemeral sessions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional


@dataclass
class InMemoryStorage:
    """StateStoragePort backed by a dict."""

    entries: Dict[str, str] = field(default_factory=dict)

    def load(self, key: str) -> Optional[str]:
        return self.entries.get(key)

    def save(self, key: str, value: str) -> None:
        self.entries[key] = value

    def remove(self, key: str) -> None:
        self.entries.pop(key, None)
