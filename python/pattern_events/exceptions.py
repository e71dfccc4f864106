"""Custom exceptions for pattern-events.

This module provides the exception hierarchy raised by the emitter.
Emission outcomes (not found, incomplete) are reported through
``EmissionResult.code`` and never raised; exceptions raised by listeners
propagate unchanged and are not wrapped.
"""

from __future__ import annotations

from typing import Any


class PatternEventsError(Exception):
    """Base exception for all pattern-events errors.

    All exceptions raised by pattern-events itself inherit from this class,
    making it easy to catch all library errors.

    Example:
        >>> try:
        ...     emitter.on(42, handler)
        ... except PatternEventsError as e:
        ...     print(f"Emitter error: {e}")
    """

    pass


class InvalidPatternError(PatternEventsError, TypeError):
    """Raised when a pattern is neither a string nor a compiled ``str`` regex.

    Attributes:
        pattern: The rejected pattern object.

    Example:
        >>> try:
        ...     emitter.on(re.compile(b"bytes"), handler)
        ... except InvalidPatternError as e:
        ...     print(e.pattern)
    """

    def __init__(self, pattern: Any) -> None:
        self.pattern = pattern
        super().__init__(
            f"Event pattern must be a str or a compiled str regex, got {type(pattern).__name__}: {pattern!r}"
        )


class EventLoopNotRunningError(PatternEventsError, RuntimeError):
    """Raised when ``emit()`` is called outside of a running event loop.

    ``emit()`` starts the dispatch eagerly on the running loop. From
    synchronous code, use ``asyncio.run(emitter.dispatch(...))`` instead.

    Example:
        >>> try:
        ...     emitter.emit("user.created")
        ... except EventLoopNotRunningError:
        ...     asyncio.run(emitter.dispatch("user.created"))
    """

    pass


__all__ = [
    "PatternEventsError",
    "InvalidPatternError",
    "EventLoopNotRunningError",
]
