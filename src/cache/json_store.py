# src/cache/json_store.py — v2
"""JSON file-based cache store (SERVICE_CACHE_DRIVER=json).

Stores each entry as an individual JSON file under CACHE_ROOT.
Does not support tags.
"""

from __future__ import annotations

import hashlib
import json
import logging
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any

from servicecache.cache.base_cache_store import (
    BaseCacheStore,
    StorageError,
    encode_json,
)

logger = logging.getLogger(__name__)


class JsonCacheStore(BaseCacheStore):
    """File-based cache store using JSON files."""

    def __init__(
        self, cache_root: Path | str, clock: Callable[[], float] = time.time
    ) -> None:
        self._root = Path(cache_root).expanduser()
        self._root.mkdir(parents=True, exist_ok=True)
        self._clock = clock

    def get(self, key: str, default: Any = None) -> Any:
        """Retrieve a value by key."""
        path = self._entry_path(key)
        if not path.exists():
            return default
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            logger.warning("Failed to decode cache entry %s: %s", key, e)
            raise StorageError(f"Corrupt cache entry {key!r}") from e
        except OSError as e:
            raise StorageError(f"Failed to read cache entry {key!r}") from e

        expires_at = data.get("expires_at")
        if expires_at is not None and expires_at <= self._clock():
            self.forget(key)
            return default
        return data.get("value")

    def put(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Store a value."""
        if ttl is not None and ttl <= 0:
            self.forget(key)
            return
        expires_at = None if ttl is None else self._clock() + ttl
        encode_json(key, value)
        payload = json.dumps({"key": key, "value": value, "expires_at": expires_at})
        try:
            self._entry_path(key).write_text(payload, encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Failed to write cache entry {key!r}") from e

    def has(self, key: str) -> bool:
        return self.get(key, _ABSENT) is not _ABSENT

    def forget(self, key: str) -> bool:
        """Remove an entry."""
        path = self._entry_path(key)
        if not path.exists():
            return False
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageError(f"Failed to delete cache entry {key!r}") from e
        return True

    def flush(self) -> bool:
        """Remove every entry file."""
        for path in self._root.glob("*.json"):
            try:
                path.unlink()
            except FileNotFoundError:
                continue
            except OSError as e:
                raise StorageError(f"Failed to flush {self._root}") from e
        return True

    def _entry_path(self, key: str) -> Path:
        """Return file path for a cache key."""
        digest = hashlib.sha1(key.encode("utf-8")).hexdigest()  # noqa: S324
        return self._root / f"{digest}.json"


_ABSENT = object()
