"""File-backed session storage.

Each key is kept in its own ``<key>.json`` file under a directory, the
way the web client keeps one localStorage entry per key.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


@dataclass
class JsonFileStorage:
    """StateStoragePort writing one file per key."""

    directory: Path

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.directory = Path(self.directory).expanduser()
        self._logger = logging.getLogger(__name__)

    def _path(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.directory / f"{key}.json"

    def load(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def save(self, key: str, value: str) -> None:
        path = self._path(key)
        self.directory.mkdir(parents=True, exist_ok=True)
        tmp = path.with_name(path.name + ".tmp")
        tmp.write_text(value, encoding="utf-8")
        tmp.replace(path)
        self._logger.debug("State saved", extra={"key": key, "path": str(path)})

    def remove(self, key: str) -> None:
        path = self._path(key)
        if path.exists():
            path.unlink()
            self._logger.debug("State removed", extra={"key": key})
