"""Thread-safe in-memory hash maps with write-through persistence.

The map keeps every record in memory and mirrors each mutation to an
embedded on-disk store (SQLite by default), so that a new instance created
over the same file later starts with the same content.

Persistence is best effort:
- at construction the map tries to open the store, ensure its namespace and
  load every stored record; if any of these steps fails the map starts
  empty and works in memory only
- every `add_update`/`delete` is applied in memory first and then mirrored;
  if mirroring fails the in-memory change is kept and persistence is
  switched off for the rest of the instance's life

Nothing is retried. The only way to get persistence back after a failure is
to create a new instance. Callers never see storage errors from map
operations; the constructor records the failing step in `load_error` for
diagnostics.

Two flavours share the implementation:
- `PersistentBytesMap` stores raw bytes
- `PersistentObjectMap` stores typed objects that know how to decode
  themselves (see `hashmap_lib.hashmap.objects`)
"""
from __future__ import annotations
import enum
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Generic, Optional, Tuple, Type, TypeVar

from hashmap_lib.exceptions import (
    BackendUnavailableError,
    DirectoryMissingError,
    RecordEncodeError,
    StoreError,
)
from hashmap_lib.storage.base import StorageBackend
from hashmap_lib.storage.locking import ReadWriteLock
from hashmap_lib.storage.memory_backend import MemoryHashMap
from hashmap_lib.storage.serializer import Serializer
from hashmap_lib.storage.sqlite_backend import DEFAULT_OPEN_TIMEOUT, SQLiteStorageBackend
from .codecs import BytesCodec, ObjectCodec, ValueCodec

logger = logging.getLogger(__name__)

V = TypeVar("V")
D = TypeVar("D")

DEFAULT_NAMESPACE = "default"


class PersistenceState(enum.Enum):
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"


def _check_key(key: Any) -> str:
    if not isinstance(key, str):
        raise TypeError(f"keys must be str, got {type(key).__name__}")
    if not key:
        raise ValueError("keys must be non-empty")
    return key


class PersistentHashMap(Generic[V]):
    """In-memory map mirrored to a `StorageBackend` namespace.

    Parameters
    - codec: converts values to and from the bytes kept by the backend
    - db_folder / db_file: location of the store
    - namespace: bucket inside the store holding this map's records
    - backend: storage backend to use instead of SQLite at db_folder/db_file
    - open_timeout: seconds to wait for the store's file lock
    """

    def __init__(
        self,
        codec: ValueCodec[V],
        db_folder: str | Path,
        db_file: str,
        namespace: str = DEFAULT_NAMESPACE,
        *,
        backend: Optional[StorageBackend] = None,
        open_timeout: float = DEFAULT_OPEN_TIMEOUT,
    ) -> None:
        if not namespace:
            raise ValueError("namespace must be non-empty")
        self._codec = codec
        self.db_folder = Path(db_folder)
        self.db_file = db_file
        self.namespace = namespace
        self._backend = backend or SQLiteStorageBackend(self.db_folder, db_file, open_timeout)
        self._memory: MemoryHashMap[V] = MemoryHashMap()
        self._lock = ReadWriteLock()
        self._state = PersistenceState.UNAVAILABLE
        with self._lock.write():
            self.load_error: Optional[StoreError] = self._load()

    # ── startup ──────────────────────────────────────────────

    def _load(self) -> Optional[StoreError]:
        if not self._backend.directory_exists():
            return self._disable(
                DirectoryMissingError("open", f"directory {self.db_folder} does not exist")
            )
        staged: Dict[str, V] = {}
        try:
            with self._backend.session(self.namespace) as handle:
                for key, data in self._backend.read_all(handle, self.namespace):
                    staged[key] = self._codec.decode(key, data)
        except StoreError as exc:
            return self._disable(exc)
        except OSError as exc:
            return self._disable(BackendUnavailableError("load", str(exc)))
        except Exception as exc:
            logger.exception("Unexpected backend failure while loading [%s]", self.namespace)
            return self._disable(BackendUnavailableError("load", f"{type(exc).__name__}: {exc}"))
        self._memory.load(staged.items())
        self._state = PersistenceState.AVAILABLE
        logger.info(
            "Loaded %d records from %s [%s]", len(staged), self.db_folder / self.db_file, self.namespace
        )
        return None

    def _disable(self, exc: StoreError) -> StoreError:
        self._state = PersistenceState.UNAVAILABLE
        logger.warning(
            "Persistence disabled for %s [%s], continuing in memory only: %s",
            self.db_folder / self.db_file,
            self.namespace,
            exc,
        )
        return exc

    # ── persistence state ────────────────────────────────────

    @property
    def persistence_state(self) -> PersistenceState:
        with self._lock.read():
            return self._state

    @property
    def persistence_available(self) -> bool:
        return self.persistence_state is PersistenceState.AVAILABLE

    def _mirror(self, operation: str, key: str, action: Callable[[Any], None]) -> None:
        # Caller holds the write lock.
        if self._state is not PersistenceState.AVAILABLE:
            return
        if not self._backend.directory_exists():
            self._disable(DirectoryMissingError(operation, f"directory {self.db_folder} does not exist"))
            return
        try:
            with self._backend.session(self.namespace) as handle:
                action(handle)
        except StoreError as exc:
            self._disable(exc)
        except OSError as exc:
            self._disable(BackendUnavailableError(operation, str(exc)))
        except Exception as exc:
            logger.exception("Unexpected backend failure during %s of %r", operation, key)
            self._disable(BackendUnavailableError(operation, f"{type(exc).__name__}: {exc}"))
        else:
            logger.debug("Mirrored %s of %r to [%s]", operation, key, self.namespace)

    # ── map operations ───────────────────────────────────────

    def count(self) -> int:
        with self._lock.read():
            return self._memory.count()

    def get_all(self) -> Dict[str, V]:
        """Return a snapshot copy of all records."""
        with self._lock.read():
            return self._memory.get_all()

    def find_by_key(self, key: str, default: Optional[Any] = None) -> Optional[V]:
        """Return the value stored under `key`, or `default` if absent."""
        with self._lock.read():
            return self._memory.find_by_key(key, default)

    def add_update(self, key: str, value: V) -> None:
        """Insert or replace `key`, then mirror the change to the store."""
        _check_key(key)
        value = self._codec.check(value)
        with self._lock.write():
            self._memory.add_update(key, value)
            if self._state is not PersistenceState.AVAILABLE:
                return
            try:
                data = self._codec.encode(key, value)
            except RecordEncodeError as exc:
                # The value is bad, not the store: skip this write only.
                logger.warning("Not persisting %r: %s", key, exc)
                return
            self._mirror("put", key, lambda handle: self._backend.put(handle, self.namespace, key, data))

    def delete(self, key: str) -> None:
        """Remove `key` (no-op if absent), then mirror the removal."""
        _check_key(key)
        with self._lock.write():
            self._memory.delete(key)
            self._mirror("delete", key, lambda handle: self._backend.delete(handle, self.namespace, key))

    def __len__(self) -> int:
        return self.count()

    def __contains__(self, key: object) -> bool:
        with self._lock.read():
            return key in self._memory

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(path={str(self.db_folder / self.db_file)!r}, "
            f"namespace={self.namespace!r}, state={self._state.value})"
        )


class PersistentBytesMap(PersistentHashMap[bytes]):
    """Persistent map of raw bytes values."""

    def __init__(
        self,
        db_folder: str | Path,
        db_file: str,
        namespace: str = DEFAULT_NAMESPACE,
        *,
        backend: Optional[StorageBackend] = None,
        open_timeout: float = DEFAULT_OPEN_TIMEOUT,
    ) -> None:
        super().__init__(
            BytesCodec(), db_folder, db_file, namespace, backend=backend, open_timeout=open_timeout
        )


class PersistentObjectMap(PersistentHashMap[D]):
    """Persistent map of typed objects.

    `value_type` must be constructible without arguments and implement
    `decode_from(data: bytes) -> str`. A record that fails to decode at
    load time aborts the whole load and leaves the map memory-only.
    """

    def __init__(
        self,
        value_type: Type[D],
        db_folder: str | Path,
        db_file: str,
        namespace: str = DEFAULT_NAMESPACE,
        *,
        serializer: Optional[Serializer] = None,
        backend: Optional[StorageBackend] = None,
        open_timeout: float = DEFAULT_OPEN_TIMEOUT,
    ) -> None:
        codec = ObjectCodec(value_type, serializer)
        self.value_type = value_type
        self.serializer = codec.serializer
        super().__init__(
            codec,
            db_folder,
            db_file,
            namespace,
            backend=backend,
            open_timeout=open_timeout,
        )


def create_persistent_bytes_map(
    db_folder: str | Path, db_file: str, namespace: str = DEFAULT_NAMESPACE, **kwargs: Any
) -> Tuple[PersistentBytesMap, Optional[StoreError]]:
    """Create a bytes map and return it with its load error (None on success)."""
    pmap = PersistentBytesMap(db_folder, db_file, namespace, **kwargs)
    return pmap, pmap.load_error


def create_persistent_object_map(
    value_type: Type[D], db_folder: str | Path, db_file: str, namespace: str = DEFAULT_NAMESPACE, **kwargs: Any
) -> Tuple[PersistentObjectMap[D], Optional[StoreError]]:
    """Create a typed map and return it with its load error (None on success)."""
    pmap = PersistentObjectMap(value_type, db_folder, db_file, namespace, **kwargs)
    return pmap, pmap.load_error
