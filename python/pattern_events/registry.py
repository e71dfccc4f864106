"""Pattern registry.

Maps canonical pattern keys to slots holding the pattern and the
listeners registered under it. Every listener entry draws its
``sequence`` from one process-wide counter, so registration order is
comparable between emitters composed with ``use()``.
"""

from __future__ import annotations

import itertools
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from .patterns import EventPattern
from .types import EventMatch

Listener = Callable[..., Any]

_sequence = itertools.count()


def next_sequence() -> int:
    """Return the next registration sequence number."""
    return next(_sequence)


@dataclass
class ListenerEntry:
    """A listener registered under one pattern.

    Attributes:
        priority: Higher values run earlier.
        sequence: Registration counter, breaks priority ties.
        callback: The listener callable.
        once: Remove the entry before its first invocation.
        fired: Set once a ``once`` entry has been invoked.
    """

    priority: int
    sequence: int
    callback: Listener
    once: bool = False
    fired: bool = False


@dataclass
class RegistrySlot:
    """The pattern registered under a key and its listeners in registration order."""

    pattern: EventPattern
    listeners: list[ListenerEntry] = field(default_factory=list)


class PatternRegistry:
    """Mapping from pattern key to ``RegistrySlot``."""

    def __init__(self) -> None:
        self._slots: dict[str, RegistrySlot] = {}

    def add(self, pattern: EventPattern, callback: Listener, priority: int = 0, *, once: bool = False) -> ListenerEntry:
        slot = self._slots.get(pattern.key)
        if slot is None:
            slot = self._slots[pattern.key] = RegistrySlot(pattern=pattern)
        entry = ListenerEntry(
            priority=int(priority),
            sequence=next_sequence(),
            callback=callback,
            once=once,
        )
        slot.listeners.append(entry)
        return entry

    def remove(self, key: str, callback: Listener) -> bool:
        """Remove the first entry under ``key`` whose callback is ``callback``."""
        slot = self._slots.get(key)
        if slot is None:
            return False
        for index, entry in enumerate(slot.listeners):
            # == so bound methods fetched twice still compare equal
            if entry.callback == callback:
                del slot.listeners[index]
                self._drop_if_empty(key)
                return True
        return False

    def remove_entry(self, key: str, entry: ListenerEntry) -> bool:
        """Remove one specific entry, compared by identity."""
        slot = self._slots.get(key)
        if slot is None:
            return False
        for index, candidate in enumerate(slot.listeners):
            if candidate is entry:
                del slot.listeners[index]
                self._drop_if_empty(key)
                return True
        return False

    def discard(self, key: str) -> bool:
        return self._slots.pop(key, None) is not None

    def clear(self) -> None:
        self._slots.clear()

    def get(self, key: str) -> RegistrySlot | None:
        return self._slots.get(key)

    def keys(self) -> list[str]:
        return list(self._slots)

    def match(self, event: str) -> dict[str, EventMatch]:
        """Test every registered pattern against ``event``."""
        matches: dict[str, EventMatch] = {}
        for key, slot in self._slots.items():
            found = slot.pattern.matches(event)
            if found is not None:
                matches[key] = found
        return matches

    def __contains__(self, key: object) -> bool:
        return key in self._slots

    def __len__(self) -> int:
        return len(self._slots)

    def _drop_if_empty(self, key: str) -> None:
        slot = self._slots.get(key)
        if slot is not None and not slot.listeners:
            del self._slots[key]


__all__ = [
    "Listener",
    "ListenerEntry",
    "PatternRegistry",
    "RegistrySlot",
    "next_sequence",
]
