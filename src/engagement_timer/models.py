"""Domain models for engagement accounting."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

ElapsedCallback = Callable[[float], object]
Advance = Callable[[float], float]


class EngagementState(str, Enum):
    ACTIVE = "active"
    IDLE = "idle"
    INACTIVE = "inactive"


@dataclass(slots=True)
class Interval:
    """A stretch of active time in clock milliseconds; ``stop`` is None while open."""

    start: float
    stop: Optional[float] = None

    @property
    def is_open(self) -> bool:
        return self.stop is None

    def duration_ms(self, now: float) -> float:
        end = now if self.stop is None else self.stop
        return end - self.start


@dataclass(slots=True)
class AbsoluteCallback:
    """Fires once, the first time elapsed active time reaches ``threshold_ms``."""

    threshold_ms: float
    callback: ElapsedCallback
    pending: bool = True


@dataclass(slots=True)
class IntervalCallback:
    """Fires whenever elapsed time reaches ``threshold_ms``, then moves it with ``advance``."""

    threshold_ms: float
    callback: ElapsedCallback
    advance: Advance


def every(period_ms: float) -> Advance:
    """Advance function for a fixed period."""

    def _advance(threshold_ms: float) -> float:
        return threshold_ms + period_ms

    return _advance


def doubling() -> Advance:
    """Advance function for exponential backoff."""

    def _advance(threshold_ms: float) -> float:
        return threshold_ms * 2

    return _advance


@dataclass(frozen=True, slots=True)
class Mark:
    time: float


@dataclass(frozen=True, slots=True)
class Measure:
    name: str
    start_time: float
    duration: float


@dataclass(frozen=True, slots=True)
class TimerSnapshot:
    state: EngagementState
    elapsed_ms: float
    idle_ms: float
    destroyed: bool

    @property
    def is_active(self) -> bool:
        return self.state is EngagementState.ACTIVE
