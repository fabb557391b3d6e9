"""Engagement state machine tying accumulation, idle detection and callbacks together."""

from __future__ import annotations

import logging
import threading
from typing import Iterable, Optional

from .accumulator import Clock, TimeAccumulator
from .config import TimerSettings
from .errors import ConfigurationError
from .idle import IdleDetector
from .marks import MarkLedger
from .models import (
    AbsoluteCallback,
    Advance,
    ElapsedCallback,
    EngagementState,
    Interval,
    IntervalCallback,
    Mark,
    Measure,
    TimerSnapshot,
)
from .scheduler import ThresholdScheduler
from .signals import SignalSource

logger = logging.getLogger(__name__)


class EngagementTimer:
    """Measures active engagement time for a single page or application.

    The timer starts ``ACTIVE`` with accumulation running. Surrounding
    adapters call ``activity``, ``tab_active`` and ``tab_inactive`` as the
    user interacts, and a tick source calls ``tick`` every
    ``settings.check_callbacks_interval_ms``. Every public entry point runs
    under one re-entrant lock, so callbacks may call back into the timer.
    """

    def __init__(
        self,
        settings: Optional[TimerSettings] = None,
        *,
        clock: Optional[Clock] = None,
        tab_active_callbacks: Iterable[ElapsedCallback] = (),
        tab_inactive_callbacks: Iterable[ElapsedCallback] = (),
        interval_callbacks: Iterable[IntervalCallback] = (),
        absolute_callbacks: Iterable[AbsoluteCallback] = (),
    ) -> None:
        self.settings = settings or TimerSettings()
        self._lock = threading.RLock()
        self._accumulator = TimeAccumulator(clock)
        self._scheduler = ThresholdScheduler()
        self._idle = IdleDetector(
            timeout_ms=self.settings.idle_timeout_ms,
            tick_ms=self.settings.check_callbacks_interval_ms,
        )
        self._ledger = MarkLedger()
        self._active_callbacks = _validated_callbacks(tab_active_callbacks, "tab_active_callbacks")
        self._inactive_callbacks = _validated_callbacks(
            tab_inactive_callbacks, "tab_inactive_callbacks"
        )
        for entry in absolute_callbacks:
            if not isinstance(entry, AbsoluteCallback) or not callable(entry.callback):
                raise ConfigurationError(f"Invalid absolute callback entry: {entry!r}")
            self._scheduler.register(entry)
        for entry in interval_callbacks:
            if (
                not isinstance(entry, IntervalCallback)
                or not callable(entry.callback)
                or not callable(entry.advance)
            ):
                raise ConfigurationError(f"Invalid interval callback entry: {entry!r}")
            self._scheduler.register(entry)

        self._sources: list[SignalSource] = []
        self._destroyed = False
        self._state = EngagementState.ACTIVE
        self._accumulator.start()

    # -- queries -------------------------------------------------------

    @property
    def state(self) -> EngagementState:
        with self._lock:
            return self._state

    @property
    def destroyed(self) -> bool:
        with self._lock:
            return self._destroyed

    @property
    def intervals(self) -> tuple[Interval, ...]:
        with self._lock:
            return self._accumulator.intervals

    def is_active(self) -> bool:
        with self._lock:
            return self._state is EngagementState.ACTIVE

    def elapsed_ms(self) -> float:
        with self._lock:
            return self._accumulator.elapsed_ms()

    def snapshot(self) -> TimerSnapshot:
        with self._lock:
            return TimerSnapshot(
                state=self._state,
                elapsed_ms=self._accumulator.elapsed_ms(),
                idle_ms=self._idle.idle_ms,
                destroyed=self._destroyed,
            )

    # -- control -------------------------------------------------------

    def start(self) -> None:
        """Resume accumulation without firing engagement callbacks."""
        with self._lock:
            if self._destroyed or self._state is EngagementState.ACTIVE:
                return
            self._resume()

    def stop(self) -> None:
        """Pause accumulation until ``start`` or ``tab_active``."""
        with self._lock:
            if self._destroyed or self._state is EngagementState.INACTIVE:
                return
            self._accumulator.stop()
            self._transition(EngagementState.INACTIVE)

    def reset(self) -> None:
        """Drop the interval history; a running timer restarts from zero."""
        with self._lock:
            if self._destroyed:
                return
            self._accumulator.reset()
            if self._state is EngagementState.ACTIVE:
                self._accumulator.start()

    def attach(self, source: SignalSource) -> None:
        with self._lock:
            if self._destroyed:
                return
            self._sources.append(source)
        source.attach(self)
        # destroy() may have run before the source started; it saw nothing to stop.
        if self.destroyed:
            source.detach()

    def destroy(self) -> None:
        """Detach every signal source and freeze the timer.

        Interval history, marks and measures stay readable.
        """
        with self._lock:
            if self._destroyed:
                return
            self._destroyed = True
            self._accumulator.stop()
            self._transition(EngagementState.INACTIVE)
            sources, self._sources = self._sources, []
        # Outside the lock so a ticker thread waiting on it can finish.
        for source in sources:
            source.detach()
        logger.info("Engagement timer destroyed after %.0fms active.", self.elapsed_ms())

    # -- events --------------------------------------------------------

    def activity(self) -> None:
        with self._lock:
            if self._destroyed or self._state is EngagementState.INACTIVE:
                return
            self._idle.reset()
            if self._state is EngagementState.IDLE:
                self._accumulator.start()
                self._transition(EngagementState.ACTIVE)

    def tab_active(self) -> None:
        """Resume from IDLE or INACTIVE; a no-op without callbacks when already ACTIVE."""
        with self._lock:
            if self._destroyed or self._state is EngagementState.ACTIVE:
                return
            self._resume()
            elapsed = self._accumulator.elapsed_ms()
            for callback in list(self._active_callbacks):
                callback(elapsed)

    def tab_inactive(self) -> None:
        """Pause from ACTIVE or IDLE; a no-op without callbacks when already INACTIVE."""
        with self._lock:
            if self._destroyed or self._state is EngagementState.INACTIVE:
                return
            self._accumulator.stop()
            self._transition(EngagementState.INACTIVE)
            elapsed = self._accumulator.elapsed_ms()
            for callback in list(self._inactive_callbacks):
                callback(elapsed)

    def tick(self) -> None:
        with self._lock:
            if self._destroyed or self._state is not EngagementState.ACTIVE:
                return
            if self._idle.advance():
                self._accumulator.stop()
                self._transition(EngagementState.IDLE)
            self._scheduler.evaluate(self._accumulator.elapsed_ms())

    # -- registration --------------------------------------------------

    def add_absolute_callback(self, threshold_ms: float, callback: ElapsedCallback) -> AbsoluteCallback:
        with self._lock:
            return self._scheduler.add_absolute(threshold_ms, callback)

    def add_interval_callback(
        self, threshold_ms: float, callback: ElapsedCallback, advance: Advance
    ) -> IntervalCallback:
        with self._lock:
            return self._scheduler.add_interval(threshold_ms, callback, advance)

    def add_active_callback(self, callback: ElapsedCallback) -> None:
        with self._lock:
            self._active_callbacks.append(callback)

    def add_inactive_callback(self, callback: ElapsedCallback) -> None:
        with self._lock:
            self._inactive_callbacks.append(callback)

    # -- marks and measures -------------------------------------------

    def mark(self, name: str) -> Mark:
        with self._lock:
            return self._ledger.mark(name, self._accumulator.elapsed_ms())

    def get_marks(self, name: str) -> list[Mark]:
        with self._lock:
            return self._ledger.get_marks(name)

    def measure(self, name: str, start_mark: str, end_mark: str) -> Measure:
        with self._lock:
            return self._ledger.measure(name, start_mark, end_mark)

    def get_measures(self, name: str) -> list[Measure]:
        with self._lock:
            return self._ledger.get_measures(name)

    def mark_names(self) -> list[str]:
        with self._lock:
            return self._ledger.mark_names()

    def measure_names(self) -> list[str]:
        with self._lock:
            return self._ledger.measure_names()

    # -- internals -----------------------------------------------------

    def _resume(self) -> None:
        self._idle.reset()
        self._accumulator.start()
        self._transition(EngagementState.ACTIVE)

    def _transition(self, new_state: EngagementState) -> None:
        logger.debug("Engagement %s -> %s", self._state.value, new_state.value)
        self._state = new_state


def _validated_callbacks(callbacks: Iterable[ElapsedCallback], name: str) -> list[ElapsedCallback]:
    result = list(callbacks)
    for callback in result:
        if not callable(callback):
            raise ConfigurationError(f"{name} entries must be callable, got {callback!r}")
    return result
