from __future__ import annotations

import pytest

from engagement_timer.config import TimerSettings
from engagement_timer.engine import EngagementTimer


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def timer(clock: FakeClock) -> EngagementTimer:
    return EngagementTimer(TimerSettings(), clock=clock)
