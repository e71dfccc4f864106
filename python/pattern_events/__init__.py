"""
Pattern Events

An in-memory, asyncio-friendly event emitter whose listeners subscribe
to literal event names or regular expressions, run in priority order,
and can stop an emission early.

Example:
    >>> import re
    >>> from pattern_events import EventEmitter, StatusCode
    >>>
    >>> emitter = EventEmitter(name="app")
    >>> emitter.on("ping", lambda: print("literal"), 1)
    >>> emitter.on(re.compile("^pi(ng)$"), lambda: print(emitter.event.parameters), 2)
    >>>
    >>> result = await emitter.emit("ping")
    ['ng']
    literal
    >>> result.code == StatusCode.OK
    True

    >>> # Compose emitters as middleware
    >>> auth = EventEmitter(name="auth")
    >>> auth.on(re.compile("^GET "), check_token, 100)
    >>> emitter.use(auth)
"""

from __future__ import annotations

from pattern_events.config import EmitterConfig
from pattern_events.emitter import EventEmitter
from pattern_events.event_bridge import EventBridge, EventNames
from pattern_events.exceptions import (
    EventLoopNotRunningError,
    InvalidPatternError,
    PatternEventsError,
)
from pattern_events.logging import (
    configure_logging,
    log_debug,
    log_error,
    log_info,
    log_trace,
    log_warn,
)
from pattern_events.patterns import LiteralPattern, RegexPattern, pattern_key, to_pattern
from pattern_events.types import (
    CurrentEvent,
    EmissionResult,
    EventMatch,
    LogContext,
    StatusCode,
)

__version__ = "0.1.0"


def version() -> str:
    """Return the package version."""
    return __version__


__all__ = [
    "__version__",
    "version",
    # Emitter
    "EventEmitter",
    "EmitterConfig",
    # Patterns
    "LiteralPattern",
    "RegexPattern",
    "pattern_key",
    "to_pattern",
    # Results
    "CurrentEvent",
    "EmissionResult",
    "EventMatch",
    "StatusCode",
    # Lifecycle bridge
    "EventBridge",
    "EventNames",
    # Exceptions
    "PatternEventsError",
    "InvalidPatternError",
    "EventLoopNotRunningError",
    # Logging
    "LogContext",
    "configure_logging",
    "log_debug",
    "log_error",
    "log_info",
    "log_trace",
    "log_warn",
]
