# tests/integration/logging/test_int_logging_subsystem.py — v2
"""Integration tests for the logging subsystem driven by cache calls.

Covers: logging/logger.py, logging/handlers.py, logging/context.py
"""

from __future__ import annotations

import json
import logging

import pytest

from servicecache.cache.memory_store import MemoryCacheStore
from servicecache.cache.service_cache import ServiceCache
from servicecache.logging.context import get_context
from servicecache.logging.logger import setup_logging

pytestmark = pytest.mark.integration


class Reports:
    def monthly(self) -> str:
        assert get_context().operation == "monthly"
        return "report"


@pytest.fixture
def json_log(tmp_path):
    log_file = tmp_path / "cache.log"
    root = setup_logging(level="DEBUG", log_format="json", log_file=log_file)
    yield log_file
    for handler in root.handlers:
        handler.close()
    root.handlers.clear()


def _records(log_file) -> list[dict]:
    for handler in logging.getLogger("servicecache").handlers:
        handler.flush()
    lines = log_file.read_text(encoding="utf-8").splitlines()
    return [json.loads(line) for line in lines if line.strip()]


class TestCacheLogging:
    def test_miss_logged_with_context(self, json_log):
        cache = ServiceCache(MemoryCacheStore())
        cache.get(Reports(), "monthly")

        misses = [r for r in _records(json_log) if r["message"].startswith("Cache miss")]
        assert len(misses) == 1
        assert misses[0]["context"]["operation"] == "monthly"
        assert misses[0]["context"]["cache_mode"] == "tagged"
        assert misses[0]["logger"] == "servicecache.cache.service_cache"

    def test_hit_not_logged_as_miss(self, json_log):
        cache = ServiceCache(MemoryCacheStore())
        cache.get(Reports(), "monthly")
        cache.get(Reports(), "monthly")

        records = _records(json_log)
        misses = [r for r in records if r["message"].startswith("Cache miss")]
        hits = [r for r in records if r["message"].startswith("Cache hit")]
        assert len(misses) == 1
        assert len(hits) == 1

    def test_context_released_after_call(self, json_log):
        ServiceCache(MemoryCacheStore()).get(Reports(), "monthly")
        assert get_context().as_dict() == {}
