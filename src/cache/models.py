# src/cache/models.py — v1
"""Cache value models: CacheOptions, RequestContext, CallerIdentity."""

from __future__ import annotations

import math
from collections.abc import Mapping
from datetime import timedelta
from typing import Any, Protocol, runtime_checkable
from urllib.parse import parse_qsl, urlsplit

from pydantic import BaseModel, ConfigDict, Field, field_validator


@runtime_checkable
class CallerIdentity(Protocol):
    """Authenticated caller exposing a stable identifier."""

    def get_auth_identifier(self) -> Any: ...


class CacheOptions(BaseModel):
    """Per-call caching options.

    ``duration`` left unset means "use the configured default"; an explicit
    ``None`` or ``0`` means cache forever.
    """

    model_config = ConfigDict(frozen=True)

    unique_to_user: bool = False
    duration: int | None = Field(default=None, ge=0)
    params: dict[str, Any] = Field(default_factory=dict)

    @field_validator("duration", mode="before")
    @classmethod
    def _coerce_timedelta(cls, v: Any) -> Any:
        if isinstance(v, timedelta):
            seconds = v.total_seconds()
            # A positive interval never rounds down to 0 (forever).
            return math.ceil(seconds) if seconds >= 0 else math.floor(seconds)
        return v

    @classmethod
    def coerce(cls, options: CacheOptions | Mapping[str, Any] | None) -> CacheOptions:
        """Accept a CacheOptions, a plain mapping or None."""
        if options is None:
            return cls()
        if isinstance(options, cls):
            return options
        return cls.model_validate(dict(options))

    def resolve_duration(self, default: int | None) -> int | None:
        """Return the explicit duration, or ``default`` when none was given."""
        if "duration" in self.model_fields_set:
            return self.duration
        return default


class RequestContext(BaseModel):
    """Snapshot of the request a cached call is made under."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    path: str = "/"
    query_params: dict[str, Any] = Field(default_factory=dict)
    user: Any = None

    @field_validator("path")
    @classmethod
    def _normalize_path(cls, v: str) -> str:
        trimmed = v.strip("/")
        return trimmed or "/"

    @classmethod
    def from_url(cls, url: str, user: Any = None) -> RequestContext:
        """Build a context from a URL such as ``/users?page=2``."""
        parts = urlsplit(url)
        query = dict(parse_qsl(parts.query, keep_blank_values=True))
        return cls(path=parts.path or "/", query_params=query, user=user)

    def caller_id(self, identifier_key: str = "id") -> Any:
        """Resolve the caller identifier, or None if there is no usable one."""
        user = self.user
        if user is None:
            return None
        if isinstance(user, CallerIdentity):
            identifier = user.get_auth_identifier()
            if identifier is not None:
                return identifier
        if isinstance(user, Mapping):
            return user.get(identifier_key)
        return getattr(user, identifier_key, None)
