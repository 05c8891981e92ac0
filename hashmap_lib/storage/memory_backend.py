"""Simple thread-safe in-memory hash map

Stores values under string keys. It knows nothing about persistence; the
persistent maps in `hashmap_lib.hashmap` layer write-through on top of it.
"""
from typing import Any, Dict, Generic, Iterable, Optional, Tuple, TypeVar

from .locking import ReadWriteLock

V = TypeVar("V")


class MemoryHashMap(Generic[V]):
    def __init__(self) -> None:
        self._lock = ReadWriteLock()
        self._store: Dict[str, V] = {}

    def count(self) -> int:
        with self._lock.read():
            return len(self._store)

    def get_all(self) -> Dict[str, V]:
        # Snapshot: callers get a copy that does not follow later mutations.
        with self._lock.read():
            return dict(self._store)

    def find_by_key(self, key: str, default: Optional[Any] = None) -> Optional[V]:
        with self._lock.read():
            return self._store.get(key, default)

    def add_update(self, key: str, value: V) -> None:
        with self._lock.write():
            self._store[key] = value

    def delete(self, key: str) -> None:
        with self._lock.write():
            self._store.pop(key, None)

    def load(self, records: Iterable[Tuple[str, V]]) -> None:
        """Replace the whole content with `records`."""
        with self._lock.write():
            self._store = dict(records)

    def __len__(self) -> int:
        return self.count()

    def __contains__(self, key: object) -> bool:
        with self._lock.read():
            return key in self._store
