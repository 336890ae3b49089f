# src/logging/context.py — v2
"""Contextual logging support — attach service, operation and cache mode to records."""

from __future__ import annotations

import contextvars
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

# Bound per cache call by bind_context().
_service: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "service", default=None
)
_operation: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "operation", default=None
)
_cache_mode: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "cache_mode", default=None
)

_VARS = {"service": _service, "operation": _operation, "cache_mode": _cache_mode}


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    service: str | None = None
    operation: str | None = None
    cache_mode: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        service=_service.get(),
        operation=_operation.get(),
        cache_mode=_cache_mode.get(),
    )


@contextmanager
def bind_context(**values: str | None) -> Iterator[LogContext]:
    """Set context variables for the duration of a ``with`` block.

    Raises:
        KeyError: For a name that is not a known context field.
    """
    tokens = [(_VARS[name], _VARS[name].set(value)) for name, value in values.items()]
    try:
        yield get_context()
    finally:
        for var, token in reversed(tokens):
            var.reset(token)


def clear_context() -> None:
    """Reset all context variables."""
    for var in _VARS.values():
        var.set(None)
