# src/cache/fingerprint.py — v1
"""Deterministic cache keys for service operations.

A fingerprint identifies one cached computation: the service type, the
operation name, the request path and the merged, sorted parameter set
(optionally including the caller id). A group tag identifies every
fingerprint emitted for one service type and drives bulk invalidation.
"""

from __future__ import annotations

import hashlib
from collections.abc import Mapping
from typing import Any
from urllib.parse import quote_plus

FINGERPRINT_PREFIX = "service-cache:"
TRACKING_PREFIX = "service-cache-tracking:"
USER_ID_PARAM = "user_id"
_FIELD_SEPARATOR = "|"


def service_identity(service: Any) -> str:
    """Return the canonical type name of a service (or of a service class)."""
    cls = service if isinstance(service, type) else type(service)
    return f"{cls.__module__}.{cls.__qualname__}"


def build_fingerprint(
    identity: str,
    operation: str,
    path: str,
    query_params: Mapping[str, Any],
    extra_params: Mapping[str, Any] | None = None,
    caller_id: Any = None,
) -> str:
    """Build the cache key for one operation call.

    Args:
        identity: Service identity, see service_identity().
        operation: Operation (method) name.
        path: Request path.
        query_params: Request query parameters.
        extra_params: Caller-supplied parameters; win over query_params.
        caller_id: Optional caller identifier, stored under ``user_id``.

    Returns:
        ``service-cache:`` followed by a 40-char SHA-1 hex digest.
    """
    params: dict[str, Any] = dict(query_params)
    params.update(extra_params or {})
    # Overwrites a same-named request parameter; no collision guard.
    if caller_id is not None:
        params[USER_ID_PARAM] = caller_id

    ordered = dict(sorted(params.items(), key=lambda item: str(item[0])))
    raw = _FIELD_SEPARATOR.join(
        [identity, operation, path, encode_params(ordered)]
    )
    digest = hashlib.sha1(raw.encode("utf-8")).hexdigest()  # noqa: S324
    return f"{FINGERPRINT_PREFIX}{digest}"


def group_tag(identity: str) -> str:
    """Return the group tag shared by all fingerprints of a service."""
    return hashlib.sha1(identity.encode("utf-8")).hexdigest()  # noqa: S324


def tracking_key(tag: str) -> str:
    """Return the store key holding the tracking record for a group tag."""
    return f"{TRACKING_PREFIX}{tag}"


def encode_params(params: Mapping[str, Any]) -> str:
    """Encode parameters as a query string, keeping the given key order.

    None values are dropped, booleans become 1/0, sequences expand to
    ``key[]=v`` pairs and mappings to ``key[sub]=v`` pairs.
    """
    pairs: list[str] = []
    for key, value in params.items():
        _encode_pair(str(key), value, pairs)
    return "&".join(pairs)


def _encode_pair(name: str, value: Any, pairs: list[str]) -> None:
    if value is None:
        return
    if isinstance(value, Mapping):
        for sub_key, sub_value in value.items():
            _encode_pair(f"{name}[{sub_key}]", sub_value, pairs)
        return
    if isinstance(value, (list, tuple)):
        for item in value:
            _encode_pair(f"{name}[]", item, pairs)
        return
    pairs.append(f"{quote_plus(name)}={quote_plus(_scalar(value))}")


def _scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)
