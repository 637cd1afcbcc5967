"""Storage adapters - Implementations of StateStoragePort.

Available implementations:
- JsonFileStorage: One JSON file per key in a directory
- InMemoryStorage: Dict-backed storage for tests
"""

from .json_file_storage import JsonFileStorage
from .memory_storage import InMemoryStorage

__all__ = ["JsonFileStorage", "InMemoryStorage"]
