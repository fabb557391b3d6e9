"""Accumulation of active time as a sequence of start/stop intervals."""

from __future__ import annotations

from time import monotonic_ns
from typing import Callable, Optional

from .models import Interval

NS_PER_MS = 1_000_000

Clock = Callable[[], float]


def monotonic_ms() -> float:
    return monotonic_ns() / NS_PER_MS


class TimeAccumulator:
    """Sums the durations of recorded intervals, including the open one."""

    def __init__(self, clock: Optional[Clock] = None) -> None:
        self._clock = clock or monotonic_ms
        self._intervals: list[Interval] = []

    @property
    def is_running(self) -> bool:
        return bool(self._intervals) and self._intervals[-1].is_open

    @property
    def intervals(self) -> tuple[Interval, ...]:
        return tuple(self._intervals)

    def start(self) -> None:
        if self.is_running:
            return
        self._intervals.append(Interval(start=self._clock()))

    def stop(self) -> None:
        if not self.is_running:
            return
        self._intervals[-1].stop = self._clock()

    def elapsed_ms(self) -> float:
        if not self._intervals:
            return 0.0
        now = self._clock() if self.is_running else 0.0
        return float(sum(interval.duration_ms(now) for interval in self._intervals))

    def reset(self) -> None:
        self._intervals.clear()
