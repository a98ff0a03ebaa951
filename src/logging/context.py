# src/logging/context.py — v2
"""Per-request logging context carried through contextvars.

Each orchestrated request gets a short request id; the orchestrator adds
the active provider and the stage it is in (vision, text). Formatters read
the snapshot on every record, so concurrent asyncio tasks never mix ids.
"""

from __future__ import annotations

import contextvars
from contextlib import contextmanager
from dataclasses import asdict, dataclass
from typing import Any, Iterator

_request_id: contextvars.ContextVar[str | None] = contextvars.ContextVar("request_id", default=None)
_provider: contextvars.ContextVar[str | None] = contextvars.ContextVar("provider", default=None)
_step: contextvars.ContextVar[str | None] = contextvars.ContextVar("step", default=None)


@dataclass(frozen=True)
class LogContext:
    request_id: str | None = None
    provider: str | None = None
    step: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Only the fields that are set."""
        return {k: v for k, v in asdict(self).items() if v is not None}


def get_context() -> LogContext:
    return LogContext(request_id=_request_id.get(), provider=_provider.get(), step=_step.get())


def set_request_context(request_id: str, provider: str | None = None) -> None:
    _request_id.set(request_id)
    _provider.set(provider)


def set_provider(provider: str | None) -> contextvars.Token:
    """Bind the active provider id; pass the token to reset_provider() to undo."""
    return _provider.set(provider)


def reset_provider(token: contextvars.Token) -> None:
    _provider.reset(token)


def set_step(step: str | None) -> None:
    """Record the orchestration stage now running."""
    _step.set(step)


def clear_context() -> None:
    for var in (_request_id, _provider, _step):
        var.set(None)


@contextmanager
def request_scope(request_id: str, provider: str | None = None) -> Iterator[LogContext]:
    """Bind a request id for the duration of a block, restoring the outer values on exit."""
    tokens = [
        (_request_id, _request_id.set(request_id)),
        (_provider, _provider.set(provider)),
        (_step, _step.set(None)),
    ]
    try:
        yield get_context()
    finally:
        for var, token in reversed(tokens):
            var.reset(token)
