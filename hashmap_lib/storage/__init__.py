"""Storage primitives for hashmap_lib: in-memory map, backends, serializers."""

from .base import StorageBackend
from .memory_backend import MemoryHashMap
from .sqlite_backend import SQLiteStorageBackend

__all__ = ["StorageBackend", "MemoryHashMap", "SQLiteStorageBackend"]
