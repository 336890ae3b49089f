# src/cache/sqlite_store.py — v2
"""SQLite-based cache store (SERVICE_CACHE_DRIVER=sqlite).

Uses stdlib sqlite3. Entries share one table with an expiration column;
tags are not supported.
"""

from __future__ import annotations

import json
import logging
import sqlite3
import time
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

from servicecache.cache.base_cache_store import (
    BaseCacheStore,
    StorageError,
    encode_json,
)

logger = logging.getLogger(__name__)

_DELETE_BATCH = 500

_SCHEMA = """
CREATE TABLE IF NOT EXISTS cache (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    expiration REAL
);
"""


class SqliteCacheStore(BaseCacheStore):
    """SQLite-backed cache store for single-host deployments."""

    def __init__(
        self, db_path: Path | str, clock: Callable[[], float] = time.time
    ) -> None:
        self._db_path = str(db_path)
        if self._db_path != ":memory:":
            path = Path(db_path).expanduser()
            path.parent.mkdir(parents=True, exist_ok=True)
            self._db_path = str(path)
        self._clock = clock
        try:
            self._conn = sqlite3.connect(self._db_path)
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.executescript(_SCHEMA)
        except sqlite3.Error as e:
            raise StorageError(f"Cannot open cache database {self._db_path}") from e

    def get(self, key: str, default: Any = None) -> Any:
        """Retrieve a value by key."""
        try:
            row = self._conn.execute(
                "SELECT value, expiration FROM cache WHERE key = ?", (key,)
            ).fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to read cache entry {key!r}") from e
        if row is None:
            return default
        value, expiration = row
        if expiration is not None and expiration <= self._clock():
            self.forget(key)
            return default
        try:
            return json.loads(value)
        except json.JSONDecodeError as e:
            logger.warning("Failed to decode cache entry %s: %s", key, e)
            raise StorageError(f"Corrupt cache entry {key!r}") from e

    def put(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Store a value (upsert)."""
        if ttl is not None and ttl <= 0:
            self.forget(key)
            return
        expiration = None if ttl is None else self._clock() + ttl
        payload = encode_json(key, value)
        self._write(
            "INSERT OR REPLACE INTO cache (key, value, expiration) VALUES (?, ?, ?)",
            (key, payload, expiration),
        )

    def has(self, key: str) -> bool:
        try:
            row = self._conn.execute(
                "SELECT expiration FROM cache WHERE key = ?", (key,)
            ).fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to read cache entry {key!r}") from e
        if row is None:
            return False
        return row[0] is None or row[0] > self._clock()

    def forget(self, key: str) -> bool:
        """Remove an entry."""
        cursor = self._write("DELETE FROM cache WHERE key = ?", (key,))
        return cursor.rowcount > 0

    def delete_multiple(self, keys: Iterable[str]) -> bool:
        """Remove several entries with batched DELETE statements."""
        keys = list(keys)
        # SQLite caps bound parameters per statement.
        for start in range(0, len(keys), _DELETE_BATCH):
            batch = keys[start : start + _DELETE_BATCH]
            placeholders = ", ".join("?" for _ in batch)
            self._write(f"DELETE FROM cache WHERE key IN ({placeholders})", batch)  # noqa: S608
        return True

    def flush(self) -> bool:
        self._write("DELETE FROM cache", ())
        return True

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    def _write(self, sql: str, params: Iterable[Any]) -> sqlite3.Cursor:
        try:
            cursor = self._conn.execute(sql, tuple(params))
            self._conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Cache write failed: {e}") from e
        return cursor
