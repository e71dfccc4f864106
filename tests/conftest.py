"""pytest configuration and fixtures for pattern_events tests.

This module provides shared fixtures for testing the pattern_events
package, including a fresh EventEmitter and a started EventBridge.
"""

from __future__ import annotations

from collections.abc import Generator
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from pattern_events import EventBridge, EventEmitter


@pytest.fixture(scope="session")
def pattern_events_module():
    """Provide the pattern_events module as a fixture."""
    import pattern_events

    return pattern_events


@pytest.fixture
def emitter() -> EventEmitter:
    """Provide a fresh, unnamed EventEmitter."""
    from pattern_events import EventEmitter

    return EventEmitter()


@pytest.fixture
def event_bridge() -> Generator[EventBridge, None, None]:
    """Provide a fresh EventBridge for each test.

    The bridge is automatically started and cleaned up after the test.
    """
    from pattern_events import EventBridge

    EventBridge.reset_instance()
    bridge = EventBridge.instance()
    bridge.start()
    yield bridge
    bridge.stop()
    EventBridge.reset_instance()


def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers",
        "slow: marks tests as slow running",
    )
