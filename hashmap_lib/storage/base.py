"""Storage backend interface definitions.

Defines the StorageBackend abstract class the persistent maps use to
mirror their content to disk. A backend only deals with raw bytes; turning
values into bytes is the caller's job (see `serializer.py`).

Backends are not held open between calls: every mirrored mutation goes
through `session`, which opens the store, ensures the namespace, hands
out the handle and closes it again.
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Iterator, Tuple


class StorageBackend(ABC):
    """Abstract storage backend.

    Implementations raise subclasses of `hashmap_lib.exceptions.StoreError`
    on failure and never leak engine-specific exceptions.
    """

    @abstractmethod
    def directory_exists(self) -> bool:
        """Return True if the directory holding the store exists."""

    @abstractmethod
    def open(self) -> Any:
        """Open the store and return an engine handle.

        Should raise `BackendUnavailableError` when the store cannot be
        opened within the configured timeout.
        """

    @abstractmethod
    def ensure_namespace(self, handle: Any, namespace: str) -> None:
        """Create `namespace` if absent. Raise `NamespaceCreateError` on failure."""

    @abstractmethod
    def read_all(self, handle: Any, namespace: str) -> Iterator[Tuple[str, bytes]]:
        """Yield every `(key, data)` pair stored in `namespace`."""

    @abstractmethod
    def put(self, handle: Any, namespace: str, key: str, data: bytes) -> None:
        """Upsert a single key in its own transaction. Raise `RecordWriteError` on failure."""

    @abstractmethod
    def delete(self, handle: Any, namespace: str, key: str) -> None:
        """Delete a single key in its own transaction. No-op if absent."""

    @abstractmethod
    def close(self, handle: Any) -> None:
        """Release the handle returned by `open`."""

    @contextmanager
    def session(self, namespace: str) -> Iterator[Any]:
        """Open the store, ensure `namespace` and close again on exit."""
        handle = self.open()
        try:
            self.ensure_namespace(handle, namespace)
            yield handle
        finally:
            self.close(handle)
