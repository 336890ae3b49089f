# src/cache/base_cache_store.py — v2
"""Abstract cache store interfaces.

BaseCacheStore is the key/value contract every backend implements.
Backends that can scope entries by tag opt in by subclassing
TaggableCacheStore; supports_tagging() checks for that capability.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any, TypeVar

if TYPE_CHECKING:
    from servicecache.cache.tagged_cache import TaggedCache

T = TypeVar("T")

_MISSING = object()


class StorageError(Exception):
    """Raised when the underlying cache backend fails."""


class BaseCacheStore(ABC):
    """Unified interface for cache storage backends.

    ``ttl`` is a number of seconds; ``None`` keeps the entry until it is
    removed explicitly, ``ttl <= 0`` removes it.
    """

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """Return the stored value, or ``default`` if absent or expired."""

    @abstractmethod
    def put(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Store a value."""

    @abstractmethod
    def has(self, key: str) -> bool:
        """Return True if an unexpired entry exists for ``key``."""

    @abstractmethod
    def forget(self, key: str) -> bool:
        """Remove an entry. Returns True if something was removed."""

    @abstractmethod
    def flush(self) -> bool:
        """Remove every entry in the store."""

    def forever(self, key: str, value: Any) -> None:
        """Store a value without expiry."""
        self.put(key, value, None)

    def delete_multiple(self, keys: Iterable[str]) -> bool:
        """Remove several entries."""
        for key in keys:
            self.forget(key)
        return True

    def remember(self, key: str, ttl: int | None, callback: Callable[[], T]) -> T:
        """Return the cached value, or compute, store and return it."""
        value = self.get(key, _MISSING)
        if value is not _MISSING:
            return value
        value = callback()
        self.put(key, value, ttl)
        return value

    def remember_forever(self, key: str, callback: Callable[[], T]) -> T:
        """Like remember(), without expiry."""
        return self.remember(key, None, callback)


class TaggableCacheStore(BaseCacheStore):
    """Store that keeps native tag membership for scoped flushes."""

    @abstractmethod
    def tag_members(self, tag: str) -> set[str]:
        """Return the keys written under ``tag``."""

    @abstractmethod
    def add_tag_member(self, tag: str, key: str) -> None:
        """Register ``key`` as belonging to ``tag``."""

    @abstractmethod
    def forget_tag(self, tag: str) -> None:
        """Drop the membership set of ``tag`` (not the entries)."""

    def tags(self, name: str) -> TaggedCache:
        """Return a repository whose writes are scoped to ``name``."""
        from servicecache.cache.tagged_cache import TaggedCache

        return TaggedCache(self, name)


def supports_tagging(store: BaseCacheStore) -> bool:
    """Return True if ``store`` offers tag-scoped repositories."""
    return isinstance(store, TaggableCacheStore)


def encode_json(key: str, value: Any) -> str:
    """Serialize ``value`` for a backend that stores JSON.

    Raises:
        StorageError: ``value`` is not JSON serializable, or would read back
            as something else (tuples, non-str mapping keys).
    """
    try:
        payload = json.dumps(value)
    except (TypeError, ValueError) as e:
        raise StorageError(f"Value for {key!r} is not JSON serializable") from e
    if json.loads(payload) != value:
        raise StorageError(
            f"Value for {key!r} does not read back unchanged from JSON"
        )
    return payload
