"""Pydantic models for pattern-events.

This module provides the data models exchanged with callers of the
emitter, using Pydantic v2 for validation and serialization:

- EventMatch: one matching pattern and its captured parameters
- CurrentEvent: the match context of the listener currently executing
- EmissionResult: the aggregated outcome of one ``emit()``
- LogContext: structured fields for the logging helpers
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any

from pydantic import BaseModel, Field


class StatusCode(IntEnum):
    """Emission completion codes.

    The values follow HTTP conventions so results can be passed straight
    through to request/response style callers.
    """

    OK = 200
    """Every matching listener ran to completion."""

    INCOMPLETE = 309
    """A listener returned ``False`` and the remaining listeners were skipped."""

    NOT_FOUND = 404
    """No registered pattern matched the event name."""

    @property
    def label(self) -> str:
        """Lower-case status name (``ok``, ``incomplete``, ``not_found``)."""
        return self.name.lower()


class EventMatch(BaseModel):
    """A registered pattern that matched an event name.

    For literal patterns ``parameters`` is empty. For regular expressions
    it holds capture groups 1..n of the first match, with groups that did
    not participate preserved as ``None``.

    Example:
        >>> matches = emitter.match("GET /users/42")
        >>> matches["/^GET /users/(\\d+)$/"].parameters
        ['42']
    """

    pattern: str = Field(description="Canonical key of the matching pattern.")
    parameters: list[str | None] = Field(
        default_factory=list,
        description="Captured groups, in group order.",
    )

    model_config = {"frozen": True}


class CurrentEvent(BaseModel):
    """Match context of the listener that is currently executing.

    Read it through ``EventEmitter.event`` from inside a listener. The
    field is overwritten on every listener invocation, including ones
    triggered by nested emissions, so after awaiting a nested ``emit()``
    it describes the nested event.
    """

    event: str = Field(description="The emitted event name.")
    pattern: str = Field(description="Canonical key of the pattern that matched.")
    parameters: list[str | None] = Field(
        default_factory=list,
        description="Captured groups from the pattern match.",
    )

    model_config = {"frozen": True}


class EmissionResult(BaseModel):
    """Outcome of a single emission.

    Example:
        >>> result = await emitter.emit("order.created", order)
        >>> if result.code == StatusCode.INCOMPLETE:
        ...     print(f"Stopped after {result.listeners_run} listeners")
    """

    code: int = Field(description="Completion code (200, 309 or 404).")
    status: str = Field(description="Completion code name.")
    event: str = Field(description="The emitted event name.")
    listeners_run: int = Field(
        default=0,
        ge=0,
        description="Number of listeners that were invoked.",
    )
    listeners_matched: int = Field(
        default=0,
        ge=0,
        description="Number of listeners that matched, including skipped ones.",
    )
    message: str = Field(default="", description="Human-readable outcome.")

    @classmethod
    def ok(cls, event: str, listeners_run: int) -> EmissionResult:
        return cls(
            code=StatusCode.OK,
            status=StatusCode.OK.label,
            event=event,
            listeners_run=listeners_run,
            listeners_matched=listeners_run,
            message="OK",
        )

    @classmethod
    def incomplete(cls, event: str, listeners_run: int, listeners_matched: int) -> EmissionResult:
        return cls(
            code=StatusCode.INCOMPLETE,
            status=StatusCode.INCOMPLETE.label,
            event=event,
            listeners_run=listeners_run,
            listeners_matched=listeners_matched,
            message=f"Incomplete: {listeners_matched - listeners_run} listener(s) skipped",
        )

    @classmethod
    def not_found(cls, event: str) -> EmissionResult:
        return cls(
            code=StatusCode.NOT_FOUND,
            status=StatusCode.NOT_FOUND.label,
            event=event,
            message="Not Found",
        )

    @property
    def is_ok(self) -> bool:
        """True when every matching listener ran."""
        return self.code == StatusCode.OK

    @property
    def is_incomplete(self) -> bool:
        """True when a listener stopped the emission early."""
        return self.code == StatusCode.INCOMPLETE

    @property
    def is_not_found(self) -> bool:
        """True when nothing matched the event name."""
        return self.code == StatusCode.NOT_FOUND


class LogContext(BaseModel):
    """Context fields for structured logging.

    Example:
        >>> context = LogContext(emitter="orders", event="order.created")
        >>> log_debug("Emission completed", context)
    """

    emitter: str | None = Field(
        default=None,
        description="Name of the emitter producing the log line.",
    )
    event: str | None = Field(
        default=None,
        description="Emitted event name.",
    )
    pattern: str | None = Field(
        default=None,
        description="Canonical pattern key.",
    )
    operation: str | None = Field(
        default=None,
        description="Current operation name.",
    )
    extra: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional free-form fields.",
    )


__all__ = [
    "StatusCode",
    "EventMatch",
    "CurrentEvent",
    "EmissionResult",
    "LogContext",
]
