"""Threshold callbacks evaluated against elapsed active time on every tick."""

from __future__ import annotations

import logging

from .models import AbsoluteCallback, Advance, ElapsedCallback, IntervalCallback

logger = logging.getLogger(__name__)


class ThresholdScheduler:
    """Owns the absolute (fire-once) and interval (repeating) callback registries.

    ``evaluate`` fires each entry at most once per call. An interval entry
    whose ``advance`` grows the threshold slower than elapsed time grows
    between ticks keeps firing on every tick until it catches up; skipped
    thresholds are not replayed.
    """

    def __init__(self) -> None:
        self._absolute: list[AbsoluteCallback] = []
        self._interval: list[IntervalCallback] = []

    def add_absolute(self, threshold_ms: float, callback: ElapsedCallback) -> AbsoluteCallback:
        entry = AbsoluteCallback(threshold_ms=threshold_ms, callback=callback)
        self.register(entry)
        return entry

    def add_interval(
        self, threshold_ms: float, callback: ElapsedCallback, advance: Advance
    ) -> IntervalCallback:
        entry = IntervalCallback(threshold_ms=threshold_ms, callback=callback, advance=advance)
        self.register(entry)
        return entry

    def register(self, entry: AbsoluteCallback | IntervalCallback) -> None:
        if isinstance(entry, AbsoluteCallback):
            self._absolute.append(entry)
        else:
            self._interval.append(entry)

    @property
    def pending_absolute(self) -> list[AbsoluteCallback]:
        return [entry for entry in self._absolute if entry.pending]

    @property
    def interval_thresholds(self) -> list[float]:
        return [entry.threshold_ms for entry in self._interval]

    def evaluate(self, elapsed_ms: float) -> int:
        """Fire every due entry once; returns the number of callbacks invoked."""
        fired = 0
        # Snapshots: entries registered by a callback wait for the next pass.
        for entry in list(self._absolute):
            if entry.pending and elapsed_ms >= entry.threshold_ms:
                entry.pending = False
                fired += 1
                entry.callback(elapsed_ms)

        for entry in list(self._interval):
            if elapsed_ms >= entry.threshold_ms:
                current = entry.threshold_ms
                entry.threshold_ms = entry.advance(current)
                fired += 1
                logger.debug(
                    "Interval threshold %.0fms reached; next at %.0fms",
                    current,
                    entry.threshold_ms,
                )
                entry.callback(elapsed_ms)
        return fired
