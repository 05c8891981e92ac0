"""Exceptions raised by the storage layer of hashmap_lib.

Persistent maps never let these escape from normal map operations; they
surface only as the diagnostic ``load_error`` of a freshly created map.
"""
from __future__ import annotations


class StoreError(Exception):
    """Raised when a backend operation fails."""

    def __init__(self, operation: str, detail: str = "") -> None:
        self.operation = operation
        self.detail = detail
        msg = f"Store error during '{operation}'"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class DirectoryMissingError(StoreError):
    """The directory holding the database file does not exist."""


class BackendUnavailableError(StoreError):
    """The database could not be opened (missing file path, lock held, timeout)."""


class NamespaceCreateError(StoreError):
    """The namespace (table) could not be created."""


class RecordDecodeError(StoreError):
    """A stored record could not be turned back into a value."""

    def __init__(self, key: str, detail: str = "") -> None:
        self.key = key
        super().__init__("decode", f"record {key!r}: {detail}" if detail else f"record {key!r}")


class RecordEncodeError(StoreError):
    """A value could not be encoded to bytes before writing."""

    def __init__(self, key: str, detail: str = "") -> None:
        self.key = key
        super().__init__("encode", f"record {key!r}: {detail}" if detail else f"record {key!r}")


class RecordWriteError(StoreError):
    """A single-key put or delete failed."""
