# src/cache/redis_store.py — v2
"""Redis-based cache store (SERVICE_CACHE_DRIVER=redis).

Suitable for distributed/multi-instance deployments. Supports tags:
membership of each tag is kept in a Redis set, so registering a key is a
single atomic SADD.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from typing import Any

import redis
from redis.exceptions import RedisError

from servicecache.cache.base_cache_store import (
    StorageError,
    TaggableCacheStore,
    encode_json,
)

logger = logging.getLogger(__name__)

_DEFAULT_PREFIX = "servicecache:"


class RedisCacheStore(TaggableCacheStore):
    """Redis-backed cache store for distributed deployments."""

    def __init__(
        self,
        redis_url: str = "",
        prefix: str = _DEFAULT_PREFIX,
        client: redis.Redis | None = None,
    ) -> None:
        if client is None:
            if not redis_url:
                raise ValueError("redis_url or client is required")
            client = redis.Redis.from_url(redis_url)
        self._client = client
        self._prefix = prefix

    def get(self, key: str, default: Any = None) -> Any:
        """Retrieve a value by key."""
        try:
            data = self._client.get(self._key(key))
        except RedisError as e:
            raise StorageError(f"Failed to read cache entry {key!r}") from e
        if data is None:
            return default
        try:
            return json.loads(data)
        except json.JSONDecodeError as e:
            logger.warning("Failed to decode cache entry %s: %s", key, e)
            raise StorageError(f"Corrupt cache entry {key!r}") from e

    def put(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Store a value, with SET EX when a TTL is given."""
        if ttl is not None and ttl <= 0:
            self.forget(key)
            return
        payload = encode_json(key, value)
        try:
            if ttl is None:
                self._client.set(self._key(key), payload)
            else:
                self._client.set(self._key(key), payload, ex=ttl)
        except RedisError as e:
            raise StorageError(f"Failed to write cache entry {key!r}") from e

    def has(self, key: str) -> bool:
        try:
            return bool(self._client.exists(self._key(key)))
        except RedisError as e:
            raise StorageError(f"Failed to read cache entry {key!r}") from e

    def forget(self, key: str) -> bool:
        """Remove an entry."""
        try:
            return bool(self._client.delete(self._key(key)))
        except RedisError as e:
            raise StorageError(f"Failed to delete cache entry {key!r}") from e

    def delete_multiple(self, keys: Iterable[str]) -> bool:
        """Remove several entries with one DEL."""
        redis_keys = [self._key(k) for k in keys]
        if not redis_keys:
            return True
        try:
            self._client.delete(*redis_keys)
        except RedisError as e:
            raise StorageError("Failed to delete cache entries") from e
        return True

    def flush(self) -> bool:
        """Remove every key under this store's prefix."""
        try:
            keys = list(self._client.scan_iter(match=f"{self._prefix}*"))
            if keys:
                self._client.delete(*keys)
        except RedisError as e:
            raise StorageError("Failed to flush cache") from e
        return True

    def tag_members(self, tag: str) -> set[str]:
        try:
            members = self._client.smembers(self._tag_key(tag))
        except RedisError as e:
            raise StorageError(f"Failed to read tag {tag!r}") from e
        return {m.decode("utf-8") if isinstance(m, bytes) else m for m in members}

    def add_tag_member(self, tag: str, key: str) -> None:
        try:
            self._client.sadd(self._tag_key(tag), key)
        except RedisError as e:
            raise StorageError(f"Failed to update tag {tag!r}") from e

    def forget_tag(self, tag: str) -> None:
        try:
            self._client.delete(self._tag_key(tag))
        except RedisError as e:
            raise StorageError(f"Failed to delete tag {tag!r}") from e

    def close(self) -> None:
        """Close the Redis connection."""
        self._client.close()

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def _tag_key(self, tag: str) -> str:
        return f"{self._prefix}tag:{tag}:entries"
