"""SQLite-backed storage backend.

All namespaces live in one database file under `<db_folder>/<db_file>`.
Each namespace is its own table of `(key TEXT PRIMARY KEY, value BLOB)`
rows. Writes are single-statement transactions; the connection is opened
with a bounded busy timeout so a store locked by another process fails
fast instead of blocking the caller indefinitely.
"""
from __future__ import annotations
import logging
import sqlite3
from pathlib import Path
from typing import Iterator, Tuple

from hashmap_lib.exceptions import (
    BackendUnavailableError,
    NamespaceCreateError,
    RecordDecodeError,
    RecordWriteError,
)
from .base import StorageBackend

logger = logging.getLogger(__name__)

DEFAULT_OPEN_TIMEOUT = 1.0


def _table(namespace: str) -> str:
    return '"' + namespace.replace('"', '""') + '"'


class SQLiteStorageBackend(StorageBackend):
    def __init__(self, db_folder: str | Path, db_file: str, open_timeout: float = DEFAULT_OPEN_TIMEOUT) -> None:
        self.db_folder = Path(db_folder)
        self.db_file = db_file
        self.open_timeout = open_timeout

    @property
    def db_path(self) -> Path:
        return self.db_folder / self.db_file

    def directory_exists(self) -> bool:
        return self.db_folder.is_dir()

    def open(self) -> sqlite3.Connection:
        try:
            conn = sqlite3.connect(str(self.db_path), timeout=self.open_timeout)
        except sqlite3.Error as exc:
            raise BackendUnavailableError("open", f"{self.db_path}: {exc}") from exc
        try:
            # Touch the schema so a non-database file or a held lock is
            # reported here rather than on the first statement.
            conn.execute("PRAGMA schema_version").fetchone()
        except sqlite3.Error as exc:
            conn.close()
            raise BackendUnavailableError("open", f"{self.db_path}: {exc}") from exc
        logger.debug("Opened %s", self.db_path)
        return conn

    def ensure_namespace(self, handle: sqlite3.Connection, namespace: str) -> None:
        try:
            with handle:
                handle.execute(
                    f"CREATE TABLE IF NOT EXISTS {_table(namespace)} "
                    "(key TEXT PRIMARY KEY, value BLOB NOT NULL)"
                )
        except sqlite3.Error as exc:
            raise NamespaceCreateError("ensure_namespace", f"{namespace}: {exc}") from exc

    def read_all(self, handle: sqlite3.Connection, namespace: str) -> Iterator[Tuple[str, bytes]]:
        try:
            cursor = handle.execute(f"SELECT key, value FROM {_table(namespace)}")
            for key, value in cursor:
                if not isinstance(value, (bytes, memoryview)):
                    # another writer stored TEXT/INTEGER/REAL in the BLOB column
                    raise RecordDecodeError(key, f"stored value is {type(value).__name__}, expected BLOB")
                yield key, bytes(value)
        except sqlite3.Error as exc:
            raise BackendUnavailableError("read_all", f"{namespace}: {exc}") from exc

    def put(self, handle: sqlite3.Connection, namespace: str, key: str, data: bytes) -> None:
        try:
            with handle:
                handle.execute(
                    f"INSERT OR REPLACE INTO {_table(namespace)} (key, value) VALUES (?, ?)",
                    (key, sqlite3.Binary(data)),
                )
        except sqlite3.Error as exc:
            raise RecordWriteError("put", f"{namespace}/{key}: {exc}") from exc

    def delete(self, handle: sqlite3.Connection, namespace: str, key: str) -> None:
        try:
            with handle:
                handle.execute(f"DELETE FROM {_table(namespace)} WHERE key = ?", (key,))
        except sqlite3.Error as exc:
            raise RecordWriteError("delete", f"{namespace}/{key}: {exc}") from exc

    def close(self, handle: sqlite3.Connection) -> None:
        handle.close()
