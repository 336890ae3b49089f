# src/cache/memory_store.py — v1
"""In-process cache store (SERVICE_CACHE_DRIVER=memory).

Supports tags. Entries live for the lifetime of the store object, so it
suits tests and single-process deployments.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable
from typing import Any

from servicecache.cache.base_cache_store import TaggableCacheStore


class MemoryCacheStore(TaggableCacheStore):
    """Dict-backed store with TTL expiry and tag membership sets."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[Any, float | None]] = {}
        self._tags: dict[str, set[str]] = {}

    def get(self, key: str, default: Any = None) -> Any:
        entry = self._entries.get(key)
        if entry is None:
            return default
        value, expires_at = entry
        if expires_at is not None and expires_at <= self._clock():
            self._entries.pop(key, None)
            return default
        return value

    def put(self, key: str, value: Any, ttl: int | None = None) -> None:
        if ttl is not None and ttl <= 0:
            self.forget(key)
            return
        expires_at = None if ttl is None else self._clock() + ttl
        self._entries[key] = (value, expires_at)

    def has(self, key: str) -> bool:
        return self.get(key, _ABSENT) is not _ABSENT

    def forget(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def delete_multiple(self, keys: Iterable[str]) -> bool:
        for key in keys:
            self._entries.pop(key, None)
        return True

    def flush(self) -> bool:
        self._entries.clear()
        self._tags.clear()
        return True

    def tag_members(self, tag: str) -> set[str]:
        """Return the live keys of ``tag``, dropping expired or forgotten ones."""
        members = self._tags.get(tag)
        if not members:
            return set()
        members.intersection_update([key for key in members if self.has(key)])
        return set(members)

    def add_tag_member(self, tag: str, key: str) -> None:
        self._tags.setdefault(tag, set()).add(key)

    def forget_tag(self, tag: str) -> None:
        self._tags.pop(tag, None)

    def __len__(self) -> int:
        return len(self._entries)


_ABSENT = object()
