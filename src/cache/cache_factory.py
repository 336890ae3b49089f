# src/cache/cache_factory.py — v3
"""Factories for cache stores and the ServiceCache built on top of them."""

from __future__ import annotations

from servicecache.cache.base_cache_store import BaseCacheStore
from servicecache.cache.models import RequestContext
from servicecache.cache.service_cache import ServiceCache
from servicecache.config.settings import Settings, load_settings


class UnsupportedCacheDriverError(ValueError):
    """Raised for a driver name no backend is registered for."""


def create_cache_store(settings: Settings | None = None) -> BaseCacheStore:
    """Instantiate the configured cache backend.

    Args:
        settings: Application settings. Defaults to the in-memory backend.

    Returns:
        Configured BaseCacheStore implementation.
    """
    driver = "memory" if settings is None else settings.service_cache_driver

    if driver == "memory":
        from servicecache.cache.memory_store import MemoryCacheStore
        return MemoryCacheStore()

    if driver == "json":
        from servicecache.cache.json_store import JsonCacheStore
        return JsonCacheStore(cache_root=settings.cache_root)  # type: ignore[union-attr]

    if driver == "sqlite":
        from servicecache.cache.sqlite_store import SqliteCacheStore
        db_path = settings.cache_root / "servicecache.db"  # type: ignore[union-attr]
        return SqliteCacheStore(db_path=db_path)

    if driver == "redis":
        from servicecache.cache.redis_store import RedisCacheStore
        # Settings validation guarantees a URL for this driver.
        return RedisCacheStore(
            redis_url=settings.cache_redis_url,  # type: ignore[union-attr]
            prefix=settings.cache_redis_prefix,  # type: ignore[union-attr]
        )

    raise UnsupportedCacheDriverError(f"Unsupported cache driver: {driver!r}")


def create_service_cache(
    settings: Settings | None = None,
    store: BaseCacheStore | None = None,
    context: RequestContext | None = None,
) -> ServiceCache:
    """Build a ServiceCache from settings.

    Args:
        settings: Application settings. Defaults to load_settings().
        store: Backend to use instead of the configured one.
        context: Default request context for calls that pass none.
    """
    if settings is None:
        settings = load_settings()
    if store is None:
        store = create_cache_store(settings)
    return ServiceCache(
        store,
        default_duration=settings.cache_duration_in_seconds,
        user_identifier_key=settings.user_identifier_key,
        context=context,
    )
