"""Emitter configuration.

Example:
    >>> config = EmitterConfig.from_env()
    >>> configure_logging(config.log_level)
    >>> emitter = EventEmitter.from_config(config)
"""

from __future__ import annotations

import os
from collections.abc import Mapping

from pydantic import BaseModel, Field

LOG_LEVEL_ENV = "PATTERN_EVENTS_LOG_LEVEL"
LIFECYCLE_ENV = "PATTERN_EVENTS_LIFECYCLE"

_TRUTHY = {"1", "true", "yes", "on"}


class EmitterConfig(BaseModel):
    """Configuration for an EventEmitter.

    Example:
        >>> config = EmitterConfig(name="orders", lifecycle_events=True)
        >>> emitter = EventEmitter.from_config(config)
    """

    name: str | None = Field(
        default=None,
        description="Emitter name used in log fields and repr.",
    )
    log_level: str = Field(
        default="info",
        pattern="^(trace|debug|info|warn|error)$",
        description="Log level for the package logger (trace, debug, info, warn, error).",
    )
    lifecycle_events: bool = Field(
        default=False,
        description="Publish lifecycle notifications on the shared EventBridge.",
    )

    model_config = {"extra": "forbid"}

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        **overrides: object,
    ) -> EmitterConfig:
        """Build a config from environment variables.

        Reads ``PATTERN_EVENTS_LOG_LEVEL`` and ``PATTERN_EVENTS_LIFECYCLE``.
        Keyword overrides win over the environment.

        Args:
            environ: Mapping to read instead of ``os.environ``.
            **overrides: Field values that take precedence.

        Returns:
            A validated EmitterConfig.

        Raises:
            pydantic.ValidationError: If a value is invalid.
        """
        env = os.environ if environ is None else environ
        data: dict[str, object] = {}

        level = env.get(LOG_LEVEL_ENV)
        if level:
            data["log_level"] = level.strip().lower()

        lifecycle = env.get(LIFECYCLE_ENV)
        if lifecycle is not None:
            data["lifecycle_events"] = lifecycle.strip().lower() in _TRUTHY

        data.update(overrides)
        return cls.model_validate(data)


__all__ = ["EmitterConfig", "LOG_LEVEL_ENV", "LIFECYCLE_ENV"]
