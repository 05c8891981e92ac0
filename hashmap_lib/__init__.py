"""hashmap_lib: thread-safe in-memory hash maps with write-through persistence.

Maps keep all records in memory and mirror every change to an embedded
SQLite file. If the file cannot be used the maps keep working in memory
only.
"""

from hashmap_lib.exceptions import (
    BackendUnavailableError,
    DirectoryMissingError,
    NamespaceCreateError,
    RecordDecodeError,
    RecordEncodeError,
    RecordWriteError,
    StoreError,
)
from hashmap_lib.hashmap import (
    Decodable,
    JSONObject,
    ModelObject,
    PersistenceState,
    PersistentBytesMap,
    PersistentHashMap,
    PersistentObjectMap,
    create_persistent_bytes_map,
    create_persistent_object_map,
)
from hashmap_lib.storage import MemoryHashMap

__all__ = [
    "BackendUnavailableError",
    "Decodable",
    "DirectoryMissingError",
    "JSONObject",
    "MemoryHashMap",
    "ModelObject",
    "NamespaceCreateError",
    "PersistenceState",
    "PersistentBytesMap",
    "PersistentHashMap",
    "PersistentObjectMap",
    "RecordDecodeError",
    "RecordEncodeError",
    "RecordWriteError",
    "StoreError",
    "create_persistent_bytes_map",
    "create_persistent_object_map",
]
