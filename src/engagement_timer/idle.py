"""Tick-driven idle counter."""

from __future__ import annotations

import math

# Absorbs float noise in timeout / tick so e.g. 0.8 / 0.1 still needs 8 ticks.
_TICK_EPSILON = 1e-9


class IdleDetector:
    """Counts whole ticks since the last activity signal."""

    def __init__(self, timeout_ms: float, tick_ms: float) -> None:
        self.timeout_ms = timeout_ms
        self.tick_ms = tick_ms
        self.ticks_to_idle = max(1, math.ceil(timeout_ms / tick_ms - _TICK_EPSILON))
        self.ticks = 0

    @property
    def idle_ms(self) -> float:
        return self.ticks * self.tick_ms

    def reset(self) -> None:
        self.ticks = 0

    def advance(self) -> bool:
        """Add one tick; True once the counter has reached the timeout."""
        self.ticks += 1
        return self.ticks >= self.ticks_to_idle
