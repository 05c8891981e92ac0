"""Build persistent maps from a `MapConfig`."""
from __future__ import annotations
from typing import Optional, Type

from hashmap_lib.config import MapConfig
from hashmap_lib.hashmap import PersistentBytesMap, PersistentHashMap, PersistentObjectMap
from hashmap_lib.storage.serializer import get_serializer


def create_map(config: Optional[MapConfig] = None, value_type: Optional[Type] = None) -> PersistentHashMap:
    """Return a bytes map, or a typed map when `value_type` is given.

    The map's `load_error` tells whether persistence came up.
    """
    cfg = config or MapConfig()
    if value_type is None:
        return PersistentBytesMap(cfg.data_dir, cfg.db_file, cfg.namespace, open_timeout=cfg.open_timeout)
    return PersistentObjectMap(
        value_type,
        cfg.data_dir,
        cfg.db_file,
        cfg.namespace,
        serializer=get_serializer(cfg.serializer),
        open_timeout=cfg.open_timeout,
    )
