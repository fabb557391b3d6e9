"""Configuration models and helpers for the engagement timer."""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass

from .errors import ConfigurationError

DEFAULT_IDLE_TIMEOUT_MS = 3000
DEFAULT_CHECK_CALLBACKS_INTERVAL_MS = 100


@dataclass(slots=True)
class TimerSettings:
    """Idle timeout and tick cadence, both in milliseconds."""

    idle_timeout_ms: float = DEFAULT_IDLE_TIMEOUT_MS
    check_callbacks_interval_ms: float = DEFAULT_CHECK_CALLBACKS_INTERVAL_MS

    def __post_init__(self) -> None:
        require_positive("idle_timeout_ms", self.idle_timeout_ms)
        require_positive("check_callbacks_interval_ms", self.check_callbacks_interval_ms)

    @classmethod
    def from_seconds(
        cls,
        idle_seconds: float,
        tick_seconds: float | None = None,
    ) -> "TimerSettings":
        tick = (
            tick_seconds
            if tick_seconds is not None
            else DEFAULT_CHECK_CALLBACKS_INTERVAL_MS / 1000
        )
        require_positive("idle_seconds", idle_seconds)
        require_positive("tick_seconds", tick)
        return cls(
            idle_timeout_ms=idle_seconds * 1000,
            check_callbacks_interval_ms=tick * 1000,
        )

    @property
    def tick_seconds(self) -> float:
        return self.check_callbacks_interval_ms / 1000


def require_positive(name: str, value: object) -> None:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise ConfigurationError(f"{name} must be a number, got {value!r}")
    if not value > 0 or not math.isfinite(value):
        raise ConfigurationError(f"{name} must be positive and finite, got {value!r}")
