"""Pattern-matching event emitter.

This module provides the EventEmitter class: listeners are registered
against literal event names or compiled regular expressions, every
emission runs all matching listeners one at a time in priority order,
and each emission reports how it concluded.

Execution order:
1. Priority, highest first (default 0)
2. Registration order among equal priorities, across composed emitters

Completion codes:
- 200: every matching listener ran
- 309: a listener returned ``False`` and the rest were skipped
- 404: nothing matched

Example:
    >>> import re
    >>> from pattern_events import EventEmitter
    >>>
    >>> emitter = EventEmitter(name="http")
    >>>
    >>> @emitter.on(re.compile(r"^GET /users/(\\d+)$"), priority=10)
    ... async def load_user(request):
    ...     user_id = emitter.event.parameters[0]
    ...     request.user = await db.fetch_user(user_id)
    ...
    >>> result = await emitter.emit("GET /users/42", request)
    >>> result.code
    200
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .event_bridge import EventBridge, EventNames
from .exceptions import EventLoopNotRunningError
from .logging import log_debug, log_error, log_trace
from .patterns import pattern_key, to_pattern
from .registry import Listener, ListenerEntry, PatternRegistry
from .types import CurrentEvent, EmissionResult, EventMatch

if TYPE_CHECKING:
    from .config import EmitterConfig
    from .patterns import PatternLike


@dataclass(frozen=True)
class _Candidate:
    """One listener invocation scheduled by an emission."""

    priority: int
    sequence: int
    match: EventMatch
    entry: ListenerEntry
    owner: EventEmitter


def _execution_order(candidate: _Candidate) -> tuple[int, int]:
    return (-candidate.priority, candidate.sequence)


class EventEmitter:
    """In-memory event dispatcher with literal and regex patterns.

    Listeners may be plain functions or coroutine functions; anything
    awaitable a listener returns is awaited before the next listener
    starts. Listeners of emitters added with ``use()`` take part in the
    same ordering as if they were registered here.

    Attributes:
        name: Optional name used in logs and repr.
    """

    def __init__(self, name: str | None = None, *, bridge: EventBridge | None = None) -> None:
        """Initialize an empty emitter.

        Args:
            name: Optional name used in log fields and repr.
            bridge: Bridge to publish lifecycle notifications on. Nothing is
                published without one.
        """
        self.name = name
        self._registry = PatternRegistry()
        self._emitters: list[EventEmitter] = []
        self._event: CurrentEvent | None = None
        self._bridge = bridge

    @classmethod
    def from_config(cls, config: EmitterConfig) -> EventEmitter:
        """Create an emitter from an ``EmitterConfig``.

        The shared ``EventBridge.instance()`` is attached and started when
        ``config.lifecycle_events`` is set.
        """
        bridge = None
        if config.lifecycle_events:
            bridge = EventBridge.instance()
            bridge.start()
        return cls(name=config.name, bridge=bridge)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def on(
        self,
        pattern: PatternLike,
        callback: Listener | None = None,
        priority: int = 0,
    ) -> Any:
        """Register a listener for an event name or regex.

        Duplicate registrations are kept; each one is invoked.

        Args:
            pattern: Literal event name or compiled ``str`` regex.
            callback: Listener to invoke. When omitted, a decorator is
                returned instead.
            priority: Higher priorities run earlier.

        Returns:
            The emitter, for chaining, or a decorator when ``callback``
            is omitted.

        Raises:
            InvalidPatternError: If ``pattern`` is not a str or str regex.

        Example:
            >>> emitter.on("user.created", send_welcome).on("user.created", audit, 10)
            >>>
            >>> @emitter.on(re.compile(r"^user\\.(\\w+)$"))
            ... def log_user_event(user):
            ...     print(emitter.event.parameters[0])
        """
        if callback is None:
            return self._decorator(pattern, priority, once=False)
        self._register(pattern, callback, priority, once=False)
        return self

    def once(
        self,
        pattern: PatternLike,
        callback: Listener | None = None,
        priority: int = 0,
    ) -> Any:
        """Register a listener that is removed before its first invocation.

        Takes the same arguments as ``on()``. A pending once-listener can be
        removed with ``unbind(pattern, callback)``.
        """
        if callback is None:
            return self._decorator(pattern, priority, once=True)
        self._register(pattern, callback, priority, once=True)
        return self

    def unbind(self, pattern: PatternLike, callback: Listener) -> EventEmitter:
        """Remove the first listener registered as ``callback`` under ``pattern``.

        Unknown patterns and callbacks are ignored.
        """
        key = pattern_key(pattern)
        if self._registry.remove(key, callback):
            log_debug(f"Unbound listener from {key}", self._fields(pattern=key))
            self._notify(EventNames.LISTENER_REMOVED, self, key, callback)
        return self

    def clear(self, pattern: PatternLike | None = None) -> EventEmitter:
        """Remove every listener under ``pattern``, or all listeners.

        Used emitters are left untouched.
        """
        if pattern is None:
            self._registry.clear()
            log_debug("Cleared all patterns", self._fields())
            return self
        key = pattern_key(pattern)
        if self._registry.discard(key):
            log_debug(f"Cleared pattern {key}", self._fields(pattern=key))
        return self

    def use(self, *emitters: EventEmitter) -> EventEmitter:
        """Compose other emitters into this one.

        Listeners of used emitters run in this emitter's emissions, ordered
        together with its own listeners. Used emitters are referenced, not
        owned, and may be used by several emitters. Cycles are not detected
        and recurse until ``RecursionError``.

        Raises:
            TypeError: If an argument is not an EventEmitter.
        """
        for other in emitters:
            if not isinstance(other, EventEmitter):
                raise TypeError(f"use() expects EventEmitter instances, got {type(other).__name__}")
            self._emitters.append(other)
            log_debug(f"Using emitter {other!r}", self._fields())
        return self

    # ------------------------------------------------------------------
    # Matching and dispatch
    # ------------------------------------------------------------------

    def match(self, event: str) -> dict[str, EventMatch]:
        """Return the directly registered patterns that match ``event``.

        Used emitters are not consulted. Keys are canonical pattern keys.

        Example:
            >>> emitter.on(re.compile("match (some)(thing)", re.I), handler)
            >>> emitter.match("match something")["/match (some)(thing)/i"].parameters
            ['some', 'thing']
        """
        return self._registry.match(event)

    def emit(self, event: str, *args: Any, **kwargs: Any) -> asyncio.Task[EmissionResult]:
        """Start an emission on the running event loop.

        The dispatch starts eagerly: the first listener runs up to its first
        suspension point before this method returns. Every later listener
        starts only after the event loop has run again, even when earlier
        listeners never suspend. Await the task for the ``EmissionResult``.

        Raises:
            EventLoopNotRunningError: If called outside a running event loop.

        Example:
            >>> result = await emitter.emit("order.created", order)
            >>> result.listeners_run
            2
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            raise EventLoopNotRunningError(
                f"emit({event!r}) requires a running event loop; use dispatch() with asyncio.run()"
            ) from None
        return asyncio.eager_task_factory(loop, self.dispatch(event, *args, **kwargs))

    async def dispatch(self, event: str, *args: Any, **kwargs: Any) -> EmissionResult:
        """Run every listener matching ``event`` and return the outcome.

        Listeners are called with ``*args`` and ``**kwargs`` one at a time.
        A listener returning ``False`` stops the emission. Exceptions raised
        by a listener propagate to the caller and stop the emission.
        """
        candidates = [c for c in self._collect(event, []) if not c.entry.fired]
        if not candidates:
            result = EmissionResult.not_found(event)
            log_debug(f"No listeners matched {event}", self._fields(event=event))
            self._notify(EventNames.EMISSION_NOT_FOUND, self, result)
            return result

        candidates.sort(key=_execution_order)
        listeners_run = 0
        for candidate in candidates:
            entry = candidate.entry
            if listeners_run:
                # Only the first listener may start before the loop regains control
                await asyncio.sleep(0)
            if entry.once:
                # Concurrent emissions may share a snapshot of the same entry
                if entry.fired:
                    continue
                entry.fired = True
                candidate.owner._consume(candidate)

            context = CurrentEvent(
                event=event,
                pattern=candidate.match.pattern,
                parameters=candidate.match.parameters,
            )
            self._event = context
            candidate.owner._event = context
            log_trace(
                f"Invoking listener for {event}",
                self._fields(event=event, pattern=context.pattern, priority=entry.priority),
            )

            try:
                outcome = entry.callback(*args, **kwargs)
                if inspect.isawaitable(outcome):
                    outcome = await outcome
            except Exception as exc:
                log_error(
                    f"Listener failed for {event}: {exc}",
                    self._fields(event=event, pattern=context.pattern, error_type=type(exc).__name__),
                )
                self._notify(EventNames.LISTENER_ERROR, self, context, exc)
                raise

            listeners_run += 1
            if outcome is False:
                result = EmissionResult.incomplete(event, listeners_run, len(candidates))
                log_debug(
                    f"Emission of {event} stopped after {listeners_run} listener(s)",
                    self._fields(event=event, pattern=context.pattern),
                )
                self._notify(EventNames.EMISSION_INCOMPLETE, self, result)
                return result

        result = EmissionResult.ok(event, listeners_run)
        log_debug(
            f"Emission of {event} completed",
            self._fields(event=event, listeners_run=listeners_run),
        )
        self._notify(EventNames.EMISSION_COMPLETED, self, result)
        return result

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def event(self) -> CurrentEvent | None:
        """Match context of the most recently invoked listener.

        Read it from inside a listener to learn which pattern matched and
        what it captured. This is a single field, not a stack: a nested
        emission started from a listener overwrites it for the rest of that
        listener, and an interleaved emission may overwrite it while a
        listener is suspended. It keeps its last value after an emission
        finishes and is ``None`` until the first listener runs.
        """
        return self._event

    @property
    def patterns(self) -> list[str]:
        """Registered pattern keys."""
        return self._registry.keys()

    @property
    def emitters(self) -> tuple[EventEmitter, ...]:
        """Emitters added with ``use()``, in order."""
        return tuple(self._emitters)

    def listeners(self, pattern: PatternLike) -> list[Listener]:
        """Listeners registered under ``pattern``, in registration order."""
        slot = self._registry.get(pattern_key(pattern))
        if slot is None:
            return []
        return [entry.callback for entry in slot.listeners]

    def listener_count(self, pattern: PatternLike) -> int:
        """Number of listeners registered under ``pattern``."""
        return len(self.listeners(pattern))

    def __repr__(self) -> str:
        label = f" {self.name!r}" if self.name else ""
        return f"<{type(self).__name__}{label} patterns={len(self._registry)} uses={len(self._emitters)}>"

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _register(self, pattern: PatternLike, callback: Listener, priority: int, *, once: bool) -> None:
        if not callable(callback):
            raise TypeError(f"Listener must be callable, got {type(callback).__name__}")
        normalized = to_pattern(pattern)
        self._registry.add(normalized, callback, priority, once=once)
        log_debug(
            f"Registered listener on {normalized.key}",
            self._fields(pattern=normalized.key, priority=priority, once=once),
        )
        self._notify(EventNames.LISTENER_REGISTERED, self, normalized.key, callback)

    def _decorator(self, pattern: PatternLike, priority: int, *, once: bool) -> Callable[[Listener], Listener]:
        # Validate now so a bad pattern fails at decoration time
        to_pattern(pattern)

        def decorator(func: Listener) -> Listener:
            self._register(pattern, func, priority, once=once)
            return func

        return decorator

    def _collect(self, event: str, candidates: list[_Candidate]) -> list[_Candidate]:
        """Append this emitter's and its used emitters' matching listeners.

        Own listeners come first, then each used emitter depth-first in
        ``use()`` order.
        """
        for key, found in self.match(event).items():
            slot = self._registry.get(key)
            if slot is None:
                continue
            for entry in slot.listeners:
                candidates.append(
                    _Candidate(
                        priority=entry.priority,
                        sequence=entry.sequence,
                        match=found,
                        entry=entry,
                        owner=self,
                    )
                )
        for other in self._emitters:
            other._collect(event, candidates)
        return candidates

    def _consume(self, candidate: _Candidate) -> None:
        if self._registry.remove_entry(candidate.match.pattern, candidate.entry):
            self._notify(EventNames.LISTENER_REMOVED, self, candidate.match.pattern, candidate.entry.callback)

    def _notify(self, name: str, *args: Any) -> None:
        if self._bridge is not None:
            self._bridge.publish(name, *args)

    def _fields(self, **fields: Any) -> dict[str, Any]:
        if self.name:
            fields["emitter"] = self.name
        return fields


__all__ = ["EventEmitter"]
