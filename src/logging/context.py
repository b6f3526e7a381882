# src/logging/context.py — v2
"""Contextual logging support: attach request_id, breed, provider to log records."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

# Context variables for structured logging, set per request.
_request_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)
_breed: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "breed", default=None
)
_species: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "species", default=None
)
_provider: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "provider", default=None
)
_stage: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "stage", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    request_id: str | None = None
    breed: str | None = None
    species: str | None = None
    provider: str | None = None
    stage: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        request_id=_request_id.get(),
        breed=_breed.get(),
        species=_species.get(),
        provider=_provider.get(),
        stage=_stage.get(),
    )


def set_request_context(
    request_id: str, breed: str | None = None, species: str | None = None
) -> None:
    """Set request-level context (called once per incoming request)."""
    _request_id.set(request_id)
    _breed.set(breed)
    _species.set(species)


def set_stage_context(stage: str | None, provider: str | None = None) -> None:
    """Set the current pipeline stage and, while dispatching, the backend."""
    _stage.set(stage)
    _provider.set(provider)


def clear_context() -> None:
    """Reset all context variables."""
    _request_id.set(None)
    _breed.set(None)
    _species.set(None)
    _provider.set(None)
    _stage.set(None)
