"""Adapters that feed ticks and activity signals into an EngagementTimer."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any, Callable, Optional, Protocol

from .accumulator import Clock, monotonic_ms
from .config import require_positive

if TYPE_CHECKING:
    from .engine import EngagementTimer

logger = logging.getLogger(__name__)


class SignalSource(Protocol):
    """Something that drives a timer's entry points until detached."""

    def attach(self, timer: "EngagementTimer") -> None: ...

    def detach(self) -> None: ...


class PeriodicTicker:
    """Calls ``timer.tick()`` from a background thread at a fixed cadence."""

    def __init__(self, interval_ms: Optional[float] = None) -> None:
        if interval_ms is not None:
            require_positive("interval_ms", interval_ms)
        self._interval_ms = interval_ms
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._stop_event: Optional[threading.Event] = None

    def attach(self, timer: "EngagementTimer") -> None:
        interval_ms = (
            self._interval_ms
            if self._interval_ms is not None
            else timer.settings.check_callbacks_interval_ms
        )
        with self._lock:
            if self._thread and self._thread.is_alive():
                return
            stop_event = threading.Event()
            thread = threading.Thread(
                target=self._run_loop,
                args=(timer, stop_event, interval_ms / 1000),
                name="engagement-ticker",
                daemon=True,
            )
            self._thread = thread
            self._stop_event = stop_event
            thread.start()
        logger.debug("Ticker started at %.0fms cadence.", interval_ms)

    def detach(self) -> None:
        thread: Optional[threading.Thread] = None
        with self._lock:
            if not self._thread or not self._stop_event:
                return
            self._stop_event.set()
            thread = self._thread
            self._thread = None
            self._stop_event = None
        # A tick callback may tear the timer down from the ticker thread itself.
        if thread is not threading.current_thread():
            thread.join(timeout=5)
        logger.debug("Ticker stopped.")

    def is_running(self) -> bool:
        with self._lock:
            return bool(self._thread and self._thread.is_alive())

    @staticmethod
    def _run_loop(
        timer: "EngagementTimer", stop_event: threading.Event, interval: float
    ) -> None:
        while not stop_event.wait(interval):
            timer.tick()


class Throttle:
    """Leading-edge throttle: forwards a call, then drops calls for ``window_ms``."""

    def __init__(
        self,
        func: Callable[..., Any],
        window_ms: float = 2000,
        clock: Optional[Clock] = None,
    ) -> None:
        self._func = func
        self.window_ms = window_ms
        self._clock = clock or monotonic_ms
        self._last_call: Optional[float] = None
        self._lock = threading.Lock()

    def __call__(self, *args: Any, **kwargs: Any) -> bool:
        now = self._clock()
        with self._lock:
            if self._last_call is not None and now - self._last_call < self.window_ms:
                return False
            self._last_call = now
        self._func(*args, **kwargs)
        return True

    def reset(self) -> None:
        with self._lock:
            self._last_call = None
