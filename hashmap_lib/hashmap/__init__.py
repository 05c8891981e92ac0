from .objects import Decodable, JSONObject, ModelObject
from .persistent import (
    PersistenceState,
    PersistentBytesMap,
    PersistentHashMap,
    PersistentObjectMap,
    create_persistent_bytes_map,
    create_persistent_object_map,
)

__all__ = [
    "Decodable",
    "JSONObject",
    "ModelObject",
    "PersistenceState",
    "PersistentBytesMap",
    "PersistentHashMap",
    "PersistentObjectMap",
    "create_persistent_bytes_map",
    "create_persistent_object_map",
]
