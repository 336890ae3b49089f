"""Service operation cache: fingerprints, stores, tracking and the ServiceCache orchestrator."""

from servicecache.cache.base_cache_store import (
    BaseCacheStore,
    StorageError,
    TaggableCacheStore,
    supports_tagging,
)
from servicecache.cache.cache_factory import (
    UnsupportedCacheDriverError,
    create_cache_store,
    create_service_cache,
)
from servicecache.cache.json_store import JsonCacheStore
from servicecache.cache.memory_store import MemoryCacheStore
from servicecache.cache.models import CacheOptions, CallerIdentity, RequestContext
from servicecache.cache.redis_store import RedisCacheStore
from servicecache.cache.service_cache import InvalidOperationError, ServiceCache
from servicecache.cache.sqlite_store import SqliteCacheStore
from servicecache.cache.tagged_cache import TaggedCache
from servicecache.cache.tracking import TrackingIndex

__all__ = [
    "BaseCacheStore",
    "CacheOptions",
    "CallerIdentity",
    "InvalidOperationError",
    "JsonCacheStore",
    "MemoryCacheStore",
    "RedisCacheStore",
    "RequestContext",
    "ServiceCache",
    "SqliteCacheStore",
    "StorageError",
    "TaggableCacheStore",
    "TaggedCache",
    "TrackingIndex",
    "UnsupportedCacheDriverError",
    "create_cache_store",
    "create_service_cache",
    "supports_tagging",
]
