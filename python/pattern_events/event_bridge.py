"""In-process lifecycle bridge for emitter observability.

This module provides the EventBridge class that wraps pyee's EventEmitter
to publish notifications about what pattern emitters are doing: listeners
being registered or removed, emissions finishing, listeners failing.
Observers subscribe here to collect metrics or audit trails without
registering listeners on the emitters themselves, so they never take
part in dispatch ordering or result codes. An observer that raises is
logged and skipped; the emission that published the notification
carries on.

Example:
    >>> from pattern_events import EventBridge, EventEmitter, EventNames
    >>>
    >>> bridge = EventBridge.instance()
    >>> bridge.start()
    >>>
    >>> def on_completed(emitter, result):
    ...     print(f"{emitter.name}: {result.event} -> {result.code}")
    ...
    >>> bridge.subscribe(EventNames.EMISSION_COMPLETED, on_completed)
    >>> emitter = EventEmitter(name="orders", bridge=bridge)
    >>>
    >>> bridge.stop()
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from pyee.base import EventEmitter as _PyeeEmitter

from .logging import log_debug, log_error, log_info, log_warn


class EventNames:
    """Constants for lifecycle notification names.

    Attributes:
        LISTENER_REGISTERED: A listener was added with on() or once().
        LISTENER_REMOVED: A listener was removed with unbind() or by once().
        EMISSION_COMPLETED: Every matching listener ran (code 200).
        EMISSION_INCOMPLETE: A listener returned False (code 309).
        EMISSION_NOT_FOUND: Nothing matched the event name (code 404).
        LISTENER_ERROR: A listener raised; the exception is re-raised after.
    """

    LISTENER_REGISTERED = "listener.registered"
    LISTENER_REMOVED = "listener.removed"
    EMISSION_COMPLETED = "emission.completed"
    EMISSION_INCOMPLETE = "emission.incomplete"
    EMISSION_NOT_FOUND = "emission.not_found"
    LISTENER_ERROR = "listener.error"


class _ObserverEmitter(_PyeeEmitter):
    """pyee emitter that isolates subscribers from each other and from publishers."""

    def _emit_run(
        self,
        f: Callable[..., Any],
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> None:
        try:
            f(*args, **kwargs)
        except Exception as e:
            log_error(
                f"EventBridge: Subscriber error: {e}",
                {
                    "subscriber": getattr(f, "__name__", str(f)),
                    "error_type": type(e).__name__,
                },
            )


class EventBridge:
    """In-process bus for emitter lifecycle notifications.

    A shared singleton is available through ``instance()``; emitters built
    with ``EventEmitter.from_config()`` publish to it when
    ``lifecycle_events`` is enabled. Independent bridges can also be
    created directly and passed to ``EventEmitter(bridge=...)``.

    Events:
        listener.registered: (emitter, pattern_key, callback)
        listener.removed: (emitter, pattern_key, callback)
        emission.completed: (emitter, EmissionResult)
        emission.incomplete: (emitter, EmissionResult)
        emission.not_found: (emitter, EmissionResult)
        listener.error: (emitter, CurrentEvent, Exception)
    """

    _instance: EventBridge | None = None

    def __init__(self) -> None:
        """Initialize the EventBridge.

        Creates a new pyee EventEmitter and sets up the event schema.
        Use EventBridge.instance() to get the shared bridge.
        """
        self._emitter = _ObserverEmitter()
        self._active = False
        self._setup_event_schema()

    @classmethod
    def instance(cls) -> EventBridge:
        """Get the singleton EventBridge instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Reset the singleton instance.

        This is primarily for testing to ensure a clean state between tests.
        Stops the current instance if active before resetting.
        """
        if cls._instance is not None:
            cls._instance.stop()
        cls._instance = None

    def _setup_event_schema(self) -> None:
        """Define the event schema for documentation."""
        self._event_schema: dict[str, str] = {
            EventNames.LISTENER_REGISTERED: "tuple[EventEmitter, str, Callable]",
            EventNames.LISTENER_REMOVED: "tuple[EventEmitter, str, Callable]",
            EventNames.EMISSION_COMPLETED: "tuple[EventEmitter, EmissionResult]",
            EventNames.EMISSION_INCOMPLETE: "tuple[EventEmitter, EmissionResult]",
            EventNames.EMISSION_NOT_FOUND: "tuple[EventEmitter, EmissionResult]",
            EventNames.LISTENER_ERROR: "tuple[EventEmitter, CurrentEvent, Exception]",
        }

    def start(self) -> None:
        """Activate the bridge.

        Notifications are only delivered while the bridge is active.
        Calling start() multiple times is safe.
        """
        if self._active:
            return
        self._active = True
        log_info("EventBridge started")

    def stop(self) -> None:
        """Deactivate the bridge and remove all subscribers.

        Calling stop() multiple times is safe.
        """
        if not self._active:
            return
        self._active = False
        self._emitter.remove_all_listeners()
        log_info("EventBridge stopped")

    def subscribe(
        self,
        event: str,
        handler: Callable[..., Any],
    ) -> None:
        """Subscribe to a lifecycle notification.

        Args:
            event: Notification name, usually an ``EventNames`` constant.
            handler: Callback invoked with the notification arguments.
        """
        self._emitter.on(event, handler)
        handler_name = getattr(handler, "__name__", str(handler))
        log_debug(f"Subscribed to {event}: {handler_name}")

    def subscribe_once(
        self,
        event: str,
        handler: Callable[..., Any],
    ) -> None:
        """Subscribe to a notification for a single invocation."""
        self._emitter.once(event, handler)
        handler_name = getattr(handler, "__name__", str(handler))
        log_debug(f"Subscribed once to {event}: {handler_name}")

    def unsubscribe(
        self,
        event: str,
        handler: Callable[..., Any],
    ) -> None:
        """Unsubscribe from a notification.

        Unknown handlers are ignored.
        """
        try:
            self._emitter.remove_listener(event, handler)
        except KeyError:
            return
        handler_name = getattr(handler, "__name__", str(handler))
        log_debug(f"Unsubscribed from {event}: {handler_name}")

    def publish(self, event: str, *args: Any, **kwargs: Any) -> None:
        """Publish a notification to all subscribers.

        If the bridge is not active, a warning is logged and the
        notification is dropped.

        Args:
            event: Notification name.
            *args: Positional arguments passed to handlers.
            **kwargs: Keyword arguments passed to handlers.
        """
        if not self._active:
            log_warn(f"EventBridge not active, dropping event: {event}")
            return

        self._emitter.emit(event, *args, **kwargs)

    def listener_count(self, event: str) -> int:
        """Get the number of subscribers for a notification."""
        return len(self._emitter.listeners(event))

    def listeners(self, event: str) -> list[Callable[..., Any]]:
        """Get all subscribers for a notification."""
        return list(self._emitter.listeners(event))

    @property
    def is_active(self) -> bool:
        """True while the bridge delivers notifications."""
        return self._active

    @property
    def event_schema(self) -> dict[str, str]:
        """Get the notification schema documentation.

        Returns:
            Dict mapping notification names to their argument types.
        """
        return self._event_schema.copy()


__all__ = ["EventBridge", "EventNames"]
