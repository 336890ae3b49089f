# tests/conftest.py — v2
"""Shared test fixtures for all unit and integration tests.

Provides sample services with call counters, request contexts, a manual
clock and one store per backend kind. No external services — Redis is
replaced by an in-process fake client.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from servicecache.cache.json_store import JsonCacheStore
from servicecache.cache.memory_store import MemoryCacheStore
from servicecache.cache.models import RequestContext
from servicecache.cache.redis_store import RedisCacheStore
from servicecache.cache.service_cache import ServiceCache
from servicecache.cache.sqlite_store import SqliteCacheStore


# === Sample services ===


class ScriptedService:
    """Service whose methods return scripted values and count calls."""

    def __init__(self, *results: Any) -> None:
        self._results = list(results)
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    def _next(self, name: str, args: tuple[Any, ...]) -> Any:
        self.calls.append((name, args))
        if len(self._results) > 1:
            return self._results.pop(0)
        return self._results[0] if self._results else None

    def get_users(self, *args: Any) -> Any:
        return self._next("get_users", args)

    def get_user_dashboard(self, *args: Any) -> Any:
        return self._next("get_user_dashboard", args)

    def _private_helper(self) -> Any:
        return "hidden"

    @property
    def call_count(self) -> int:
        return len(self.calls)


class OtherScriptedService(ScriptedService):
    """Distinct service type, for group isolation checks."""


class User:
    def __init__(self, id: Any) -> None:  # noqa: A002
        self.id = id


class ManualClock:
    """Clock returning a settable time, for TTL tests."""

    def __init__(self, now: float = 1_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeRedis:
    """Minimal in-process stand-in for a redis.Redis client."""

    def __init__(self) -> None:
        self.data: dict[str, bytes] = {}
        self.ttls: dict[str, int] = {}
        self.sets: dict[str, set[str]] = {}

    def get(self, key: str) -> bytes | None:
        return self.data.get(key)

    def set(self, key: str, value: str, ex: int | None = None) -> bool:
        self.data[key] = value.encode("utf-8")
        if ex is None:
            self.ttls.pop(key, None)
        else:
            self.ttls[key] = ex
        return True

    def exists(self, key: str) -> int:
        return int(key in self.data)

    def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None or self.sets.pop(key, None) is not None:
                removed += 1
            self.ttls.pop(key, None)
        return removed

    def sadd(self, key: str, *members: str) -> int:
        bucket = self.sets.setdefault(key, set())
        before = len(bucket)
        bucket.update(members)
        return len(bucket) - before

    def smembers(self, key: str) -> set[bytes]:
        return {m.encode("utf-8") for m in self.sets.get(key, set())}

    def scan_iter(self, match: str = "*"):
        prefix = match.rstrip("*")
        return iter([k for k in [*self.data, *self.sets] if k.startswith(prefix)])

    def close(self) -> None:
        pass


# === FIXTURES ===


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def memory_store(clock: ManualClock) -> MemoryCacheStore:
    return MemoryCacheStore(clock=clock)


@pytest.fixture
def sqlite_store(tmp_path: Path, clock: ManualClock):
    store = SqliteCacheStore(db_path=tmp_path / "cache.db", clock=clock)
    yield store
    store.close()


@pytest.fixture
def json_store(tmp_path: Path, clock: ManualClock) -> JsonCacheStore:
    return JsonCacheStore(cache_root=tmp_path / "json", clock=clock)


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def redis_store(fake_redis: FakeRedis) -> RedisCacheStore:
    return RedisCacheStore(client=fake_redis)  # type: ignore[arg-type]


@pytest.fixture(params=["memory", "redis", "sqlite", "json"])
def any_store(request: pytest.FixtureRequest):
    """Each backend in turn: tagging (memory, redis) and tracked (sqlite, json)."""
    return request.getfixturevalue(f"{request.param}_store")


@pytest.fixture
def service_cache(any_store) -> ServiceCache:
    return ServiceCache(any_store)


@pytest.fixture
def root_context() -> RequestContext:
    return RequestContext(path="/")


@pytest.fixture
def scripted_service() -> type[ScriptedService]:
    return ScriptedService


@pytest.fixture
def other_scripted_service() -> type[OtherScriptedService]:
    return OtherScriptedService


@pytest.fixture
def user_cls() -> type[User]:
    return User
