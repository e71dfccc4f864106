"""Structured logging for pattern-events.

This module provides structured logging functions on top of the standard
``logging`` package. Every call takes a message and an optional set of
fields; the fields are normalized to strings and attached to the log
record as ``record.fields`` so handlers and formatters can render them.

Example:
    >>> from pattern_events import log_info, log_error
    >>>
    >>> log_info("Emitter ready", {"emitter": "orders"})
    >>>
    >>> try:
    ...     await emitter.emit("order.created", order)
    ... except Exception as e:
    ...     log_error(f"Emission failed: {e}", {
    ...         "event": "order.created",
    ...         "error_type": type(e).__name__
    ...     })
"""

from __future__ import annotations

import logging
from typing import Any

from .types import LogContext

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

LOGGER_NAME = "pattern_events"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s%(fields_suffix)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

_LEVELS = {
    "trace": TRACE,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}

_logger = logging.getLogger(LOGGER_NAME)


def log_error(message: str, fields: dict[str, Any] | LogContext | None = None) -> None:
    """Log an ERROR level message with structured fields.

    Use this for listener failures and other errors that reach the caller.

    Args:
        message: The log message.
        fields: Optional structured fields for context. Can be a dict
                or a LogContext instance.

    Example:
        >>> log_error("Listener failed", {
        ...     "event": "order.created",
        ...     "error_type": "ValueError"
        ... })
    """
    _log(logging.ERROR, message, fields)


def log_warn(message: str, fields: dict[str, Any] | LogContext | None = None) -> None:
    """Log a WARN level message with structured fields.

    Use this for dropped notifications and other degraded operation.

    Args:
        message: The log message.
        fields: Optional structured fields for context.
    """
    _log(logging.WARNING, message, fields)


def log_info(message: str, fields: dict[str, Any] | LogContext | None = None) -> None:
    """Log an INFO level message with structured fields.

    Use this for lifecycle events and state transitions.

    Args:
        message: The log message.
        fields: Optional structured fields for context.

    Example:
        >>> log_info("EventBridge started")
    """
    _log(logging.INFO, message, fields)


def log_debug(message: str, fields: dict[str, Any] | LogContext | None = None) -> None:
    """Log a DEBUG level message with structured fields.

    Use this for registration changes and emission outcomes.

    Args:
        message: The log message.
        fields: Optional structured fields for context.

    Example:
        >>> log_debug("Emission completed", {
        ...     "event": "order.created",
        ...     "listeners_run": "3"
        ... })
    """
    _log(logging.DEBUG, message, fields)


def log_trace(message: str, fields: dict[str, Any] | LogContext | None = None) -> None:
    """Log a TRACE level message with structured fields.

    Use this for very verbose logging, like per-listener invocation.
    This level is typically disabled in production.

    Args:
        message: The log message.
        fields: Optional structured fields for context.
    """
    _log(TRACE, message, fields)


def configure_logging(level: str = "info", handler: logging.Handler | None = None) -> logging.Logger:
    """Attach a handler to the package logger and set its level.

    Calling it again replaces the handler installed by the previous call.

    Args:
        level: One of ``trace``, ``debug``, ``info``, ``warn``, ``error``.
        handler: Handler to install. Defaults to a ``StreamHandler``.

    Returns:
        The package logger.

    Raises:
        ValueError: If ``level`` is not a known level name.
    """
    try:
        numeric = _LEVELS[level.lower()]
    except KeyError:
        raise ValueError(f"Unknown log level: {level!r}") from None

    for existing in list(_logger.handlers):
        if getattr(existing, "_pattern_events_handler", False):
            _logger.removeHandler(existing)

    handler = handler or logging.StreamHandler()
    handler.setFormatter(_FieldsFormatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    handler._pattern_events_handler = True  # type: ignore[attr-defined]
    _logger.addHandler(handler)
    _logger.setLevel(numeric)
    return _logger


class _FieldsFormatter(logging.Formatter):
    """Formatter that appends ``key=value`` pairs from ``record.fields``."""

    def format(self, record: logging.LogRecord) -> str:
        fields = getattr(record, "fields", None)
        if fields:
            record.fields_suffix = " " + " ".join(f"{k}={v}" for k, v in fields.items())
        else:
            record.fields_suffix = ""
        return super().format(record)


def _log(level: int, message: str, fields: dict[str, Any] | LogContext | None) -> None:
    if not _logger.isEnabledFor(level):
        return
    _logger.log(level, message, extra={"fields": _normalize_fields(fields)})


def _normalize_fields(
    fields: dict[str, Any] | LogContext | None,
) -> dict[str, str] | None:
    """Normalize fields to a dict of strings.

    Args:
        fields: Input fields as dict, LogContext, or None.

    Returns:
        Dict with string values, or None if no fields.
    """
    if fields is None:
        return None

    if isinstance(fields, LogContext):
        # Flatten LogContext, excluding None values
        data = fields.model_dump(exclude={"extra"})
        normalized = {k: str(v) for k, v in data.items() if v is not None}
        normalized.update({k: str(v) for k, v in fields.extra.items()})
        return normalized

    return {k: str(v) for k, v in fields.items()}


__all__ = [
    "TRACE",
    "configure_logging",
    "log_error",
    "log_warn",
    "log_info",
    "log_debug",
    "log_trace",
]
