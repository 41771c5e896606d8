# src/logging/context.py - v3
"""Contextual logging support: attach provider, model and region to log records.

Each chat call sets the context on entry and restores the previous values
on exit, so records logged by the caller afterwards are not tagged.
"""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

_provider: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "provider", default=None
)
_model: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "model", default=None
)
_region: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "region", default=None
)

ContextTokens = tuple[contextvars.Token, contextvars.Token, contextvars.Token]


@dataclass
class LogContext:
    """Snapshot of current logging context."""

    provider: str | None = None
    model: str | None = None
    region: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        provider=_provider.get(),
        model=_model.get(),
        region=_region.get(),
    )


def set_request_context(
    provider: str, model: str, region: str | None = None
) -> ContextTokens:
    """Set per-call context. Pass the returned tokens to reset_request_context()."""
    return (_provider.set(provider), _model.set(model), _region.set(region))


def reset_request_context(tokens: ContextTokens) -> None:
    """Restore the context that was active before set_request_context()."""
    provider_token, model_token, region_token = tokens
    _region.reset(region_token)
    _model.reset(model_token)
    _provider.reset(provider_token)


def clear_context() -> None:
    """Reset all context variables."""
    _provider.set(None)
    _model.set(None)
    _region.set(None)
