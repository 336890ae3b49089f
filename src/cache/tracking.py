# src/cache/tracking.py — v1
"""Key tracking for stores without native tags.

For every service group the index keeps a record ``{fingerprint: fingerprint}``
under ``tracking_key(tag)`` in the same store as the cached values, so a
later clear can find and delete them.

The record is updated with a read-modify-write. Two writers adding to the
same group concurrently can lose one registration; the lost fingerprint
then survives clears until its own TTL runs out.
"""

from __future__ import annotations

import logging

from servicecache.cache.base_cache_store import BaseCacheStore
from servicecache.cache.fingerprint import tracking_key

logger = logging.getLogger(__name__)


class TrackingIndex:
    """Per-group record of fingerprints written to a non-tagging store."""

    def __init__(self, store: BaseCacheStore) -> None:
        self._store = store

    def add(self, tag: str, fingerprint: str) -> None:
        """Register ``fingerprint`` under ``tag``. Idempotent."""
        record = self._read(tag)
        if fingerprint not in record:
            logger.debug("Tracking %s under %s", fingerprint, tag)
        record[fingerprint] = fingerprint
        self._store.forever(tracking_key(tag), record)

    def keys(self, tag: str) -> set[str]:
        """Return the fingerprints currently tracked for ``tag``."""
        return set(self._read(tag).values())

    def drain_and_clear(self, tag: str) -> set[str]:
        """Return the tracked fingerprints and drop the record.

        The cached entries themselves are left for the caller to delete.
        """
        fingerprints = self.keys(tag)
        self._store.forget(tracking_key(tag))
        return fingerprints

    def _read(self, tag: str) -> dict[str, str]:
        record = self._store.get(tracking_key(tag))
        if not isinstance(record, dict):
            if record is not None:
                logger.warning("Ignoring malformed tracking record for %s", tag)
            return {}
        return dict(record)
