# src/cache/service_cache.py — v1
"""Memoize service operations and invalidate them per service.

ServiceCache caches the result of a service call under a fingerprint of
the calling context (service type, operation, request path, parameters and
optionally the caller) and clears everything cached for one service type
in one call.

Two invalidation modes are chosen once, when the cache is created:

- tagged: the store supports tags (see supports_tagging()); entries are
  written through the store's tag-scoped repository and cleared with its
  flush.
- tracked: the store has no tags; every fingerprint is recorded in a
  TrackingIndex kept in the same store, and clear() deletes the recorded
  keys.

A duration of ``None`` or ``0`` caches forever; a positive duration is the
TTL in seconds.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any, TypeVar

from servicecache.cache.base_cache_store import BaseCacheStore, supports_tagging
from servicecache.cache.fingerprint import build_fingerprint, group_tag, service_identity
from servicecache.cache.models import CacheOptions, RequestContext
from servicecache.cache.tracking import TrackingIndex
from servicecache.logging.context import bind_context

logger = logging.getLogger(__name__)

T = TypeVar("T")

OptionsArg = CacheOptions | Mapping[str, Any] | None

_EMPTY_CONTEXT = RequestContext()


class InvalidOperationError(AttributeError):
    """Raised when the requested method is not a public callable of the service."""


class ServiceCache:
    """Remember-or-compute cache for service operations."""

    def __init__(
        self,
        store: BaseCacheStore,
        *,
        default_duration: int | None = 600,
        user_identifier_key: str = "id",
        context: RequestContext | None = None,
    ) -> None:
        self._store = store
        self._default_duration = default_duration
        self._user_identifier_key = user_identifier_key
        self._context = context
        self._tagging_supported = supports_tagging(store)
        self._tracking = TrackingIndex(store)

    @property
    def store(self) -> BaseCacheStore:
        return self._store

    @property
    def tagging_supported(self) -> bool:
        return self._tagging_supported

    @property
    def mode(self) -> str:
        return "tagged" if self._tagging_supported else "tracked"

    def get(
        self,
        service: Any,
        method_name: str,
        args: Sequence[Any] = (),
        options: OptionsArg = None,
        *,
        kwargs: Mapping[str, Any] | None = None,
        context: RequestContext | None = None,
    ) -> Any:
        """Return ``service.method_name(*args, **kwargs)``, cached.

        The arguments are not part of the cache key; vary ``params`` in the
        options when different arguments must cache separately.

        Raises:
            InvalidOperationError: ``method_name`` is not a public callable
                of ``service``. Raised before the store is touched.
            StorageError: The store failed.
        """
        method = self._resolve_method(service, method_name)
        call_kwargs = dict(kwargs or {})
        return self.remember(
            service,
            method_name,
            lambda: method(*args, **call_kwargs),
            options,
            context=context,
        )

    def remember(
        self,
        service: Any,
        operation: str,
        callback: Callable[[], T],
        options: OptionsArg = None,
        *,
        context: RequestContext | None = None,
    ) -> T:
        """Return the cached result of ``callback``, computing it on a miss.

        ``service`` and ``operation`` only feed the cache key and group tag;
        ``callback`` takes no arguments and produces the value.
        """
        opts = CacheOptions.coerce(options)
        identity = service_identity(service)
        key = self._fingerprint(identity, operation, opts, context)
        duration = opts.resolve_duration(self._default_duration)
        ttl = None if not duration else duration

        misses: list[str] = []
        compute = self._counted(key, callback, misses)

        with bind_context(service=identity, operation=operation, cache_mode=self.mode):
            if self._tagging_supported:
                value = self._remember_tagged(identity, key, ttl, compute)
            else:
                value = self._remember_tracked(identity, key, ttl, compute)
            logger.debug("Cache %s for %s", "miss" if misses else "hit", key)
        return value

    def fingerprint(
        self,
        service: Any,
        operation: str,
        options: OptionsArg = None,
        *,
        context: RequestContext | None = None,
    ) -> str:
        """Return the cache key a call with these arguments would use."""
        opts = CacheOptions.coerce(options)
        return self._fingerprint(service_identity(service), operation, opts, context)

    def clear(self, service: Any) -> bool:
        """Remove everything cached for the type of ``service``."""
        identity = service_identity(service)
        tag = group_tag(identity)

        with bind_context(service=identity, cache_mode=self.mode):
            if self._tagging_supported:
                cleared = self._store.tags(tag).flush()  # type: ignore[attr-defined]
                logger.debug("Flushed tag %s for %s", tag, identity)
                return cleared

            keys = self._tracking.drain_and_clear(tag)
            if keys:
                self._store.delete_multiple(sorted(keys))
            logger.debug("Cleared %d tracked keys for %s", len(keys), identity)
            return True

    # --- internals ---

    def _remember_tagged(
        self, identity: str, key: str, ttl: int | None, callback: Callable[[], T]
    ) -> T:
        tagged = self._store.tags(group_tag(identity))  # type: ignore[attr-defined]
        if ttl is None:
            return tagged.remember_forever(key, callback)
        return tagged.remember(key, ttl, callback)

    def _remember_tracked(
        self, identity: str, key: str, ttl: int | None, callback: Callable[[], T]
    ) -> T:
        if ttl is None:
            if not self._store.has(key):
                value = callback()
                self._store.forever(key, value)
            else:
                value = self._store.get(key)
        else:
            value = self._store.remember(key, ttl, callback)

        # Registered on hits as well as misses.
        self._tracking.add(group_tag(identity), key)
        return value

    def _fingerprint(
        self,
        identity: str,
        operation: str,
        opts: CacheOptions,
        context: RequestContext | None,
    ) -> str:
        ctx = context if context is not None else self._context
        if ctx is None:
            ctx = _EMPTY_CONTEXT
        caller_id = None
        if opts.unique_to_user:
            caller_id = ctx.caller_id(self._user_identifier_key)
            if caller_id is None:
                logger.debug("unique_to_user requested without a caller; key is shared")
        return build_fingerprint(
            identity,
            operation,
            ctx.path,
            ctx.query_params,
            opts.params,
            caller_id,
        )

    @staticmethod
    def _resolve_method(service: Any, method_name: str) -> Callable[..., Any]:
        method = None
        if isinstance(method_name, str) and method_name and not method_name.startswith("_"):
            method = getattr(service, method_name, None)
        if not callable(method):
            raise InvalidOperationError(
                f"The method [{method_name}] is not callable on service "
                f"[{service_identity(service)}]."
            )
        return method

    @staticmethod
    def _counted(key: str, callback: Callable[[], T], misses: list[str]) -> Callable[[], T]:
        def compute() -> T:
            misses.append(key)
            return callback()

        return compute
