# src/cache/tagged_cache.py — v1
"""Tag-scoped view over a TaggableCacheStore."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeVar

if TYPE_CHECKING:
    from servicecache.cache.base_cache_store import TaggableCacheStore

T = TypeVar("T")

_MISSING = object()


class TaggedCache:
    """Reads and writes entries registered under a single tag."""

    def __init__(self, store: TaggableCacheStore, tag: str) -> None:
        self._store = store
        self._tag = tag

    @property
    def tag(self) -> str:
        return self._tag

    def get(self, key: str, default: Any = None) -> Any:
        return self._store.get(key, default)

    def put(self, key: str, value: Any, ttl: int | None = None) -> None:
        self._store.put(key, value, ttl)
        self._store.add_tag_member(self._tag, key)

    def remember(self, key: str, ttl: int | None, callback: Callable[[], T]) -> T:
        """Return the cached value, or compute it and store it under the tag."""
        value = self._store.get(key, _MISSING)
        if value is not _MISSING:
            return value
        value = callback()
        self.put(key, value, ttl)
        return value

    def remember_forever(self, key: str, callback: Callable[[], T]) -> T:
        return self.remember(key, None, callback)

    def flush(self) -> bool:
        """Delete every entry written under the tag."""
        members = self._store.tag_members(self._tag)
        if members:
            self._store.delete_multiple(sorted(members))
        self._store.forget_tag(self._tag)
        return True
