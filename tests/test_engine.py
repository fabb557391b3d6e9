import pytest

from engagement_timer.config import TimerSettings
from engagement_timer.engine import EngagementTimer
from engagement_timer.errors import ConfigurationError, NotFoundError
from engagement_timer.models import AbsoluteCallback, EngagementState, IntervalCallback, every


def run_ticks(timer, clock, count):
    for _ in range(count):
        clock.advance(timer.settings.check_callbacks_interval_ms)
        timer.tick()


def test_starts_active_and_accumulating(timer, clock):
    assert timer.state is EngagementState.ACTIVE
    assert timer.is_active()
    clock.advance(250)
    assert timer.elapsed_ms() == 250


def test_becomes_idle_after_exactly_thirty_ticks(timer, clock):
    run_ticks(timer, clock, 29)
    assert timer.state is EngagementState.ACTIVE

    run_ticks(timer, clock, 1)
    assert timer.state is EngagementState.IDLE
    assert timer.elapsed_ms() == 3_000

    clock.advance(10_000)
    assert timer.elapsed_ms() == 3_000


def test_activity_restarts_idle_countdown(timer, clock):
    run_ticks(timer, clock, 20)
    timer.activity()
    run_ticks(timer, clock, 29)
    assert timer.state is EngagementState.ACTIVE
    assert timer.snapshot().idle_ms == 2_900

    run_ticks(timer, clock, 1)
    assert timer.state is EngagementState.IDLE


def test_activity_while_idle_resumes(timer, clock):
    run_ticks(timer, clock, 30)
    clock.advance(5_000)

    timer.activity()

    assert timer.state is EngagementState.ACTIVE
    assert timer.snapshot().idle_ms == 0
    clock.advance(100)
    assert timer.elapsed_ms() == 3_100


def test_tab_inactive_freezes_elapsed_and_ignores_ticks(timer, clock):
    seen = []
    timer.add_inactive_callback(seen.append)
    clock.advance(400)

    timer.tab_inactive()
    run_ticks(timer, clock, 100)
    timer.activity()

    assert timer.state is EngagementState.INACTIVE
    assert timer.elapsed_ms() == 400
    assert seen == [400]


def test_tab_active_resumes_from_frozen_value(timer, clock):
    seen = []
    timer.add_active_callback(seen.append)
    clock.advance(400)
    timer.tab_inactive()
    clock.advance(60_000)

    timer.tab_active()
    clock.advance(100)

    assert seen == [400]
    assert timer.elapsed_ms() == 500


def test_tab_inactive_from_idle_fires_callbacks_only(timer, clock):
    seen = []
    timer.add_inactive_callback(seen.append)
    run_ticks(timer, clock, 30)

    timer.tab_inactive()

    assert timer.state is EngagementState.INACTIVE
    assert seen == [3_000]
    assert len(timer.intervals) == 1


def test_repeated_visibility_events_are_noops(timer, clock):
    active, inactive = [], []
    timer.add_active_callback(active.append)
    timer.add_inactive_callback(inactive.append)

    timer.tab_active()
    timer.tab_inactive()
    timer.tab_inactive()

    assert active == []
    assert len(inactive) == 1


def test_thresholds_evaluated_on_idle_transition_tick(timer, clock):
    fired = []
    timer.add_absolute_callback(3_000, fired.append)

    run_ticks(timer, clock, 30)

    assert timer.state is EngagementState.IDLE
    assert fired == [3_000]


def test_no_callbacks_fire_for_time_spent_inactive(timer, clock):
    fired = []
    timer.add_absolute_callback(1_000, fired.append)
    clock.advance(500)
    timer.tab_inactive()
    clock.advance(10_000)
    run_ticks(timer, clock, 5)

    assert fired == []
    timer.tab_active()
    run_ticks(timer, clock, 5)
    assert fired == [1_000]


def test_interval_callback_driven_by_ticks(clock):
    fired = []
    timer = EngagementTimer(
        TimerSettings(idle_timeout_ms=60_000, check_callbacks_interval_ms=100),
        clock=clock,
        interval_callbacks=[IntervalCallback(250, fired.append, every(250))],
    )

    run_ticks(timer, clock, 10)

    assert fired == [300, 500, 800, 1_000]


def test_constructor_absolute_entries_keep_identity(clock):
    fired = []
    entry = AbsoluteCallback(100, fired.append)
    timer = EngagementTimer(clock=clock, absolute_callbacks=[entry])

    run_ticks(timer, clock, 3)

    assert fired == [100]
    assert entry.pending is False


def test_stop_and_start_pause_without_callbacks(timer, clock):
    seen = []
    timer.add_active_callback(seen.append)
    timer.add_inactive_callback(seen.append)
    clock.advance(100)

    timer.stop()
    clock.advance(900)
    timer.start()
    clock.advance(100)

    assert seen == []
    assert timer.elapsed_ms() == 200
    assert len(timer.intervals) == 2


def test_reset_while_active_keeps_running(timer, clock):
    clock.advance(700)
    timer.reset()
    clock.advance(50)

    assert timer.is_active()
    assert timer.elapsed_ms() == 50


def test_reset_while_inactive_stays_paused(timer, clock):
    clock.advance(700)
    timer.tab_inactive()
    timer.reset()
    clock.advance(50)

    assert timer.elapsed_ms() == 0
    assert timer.intervals == ()


def test_callback_can_reenter_timer(timer, clock):
    timer.add_absolute_callback(200, lambda elapsed: timer.mark("two-hundred"))

    run_ticks(timer, clock, 2)

    assert [mark.time for mark in timer.get_marks("two-hundred")] == [200]


class RecordingSource:
    def __init__(self):
        self.attached = None
        self.detached = 0

    def attach(self, timer):
        self.attached = timer

    def detach(self):
        self.detached += 1


def test_destroy_detaches_sources_and_keeps_history(timer, clock):
    source = RecordingSource()
    timer.attach(source)
    clock.advance(300)
    timer.mark("a")

    timer.destroy()
    timer.destroy()
    clock.advance(1_000)
    timer.tab_active()
    timer.activity()
    timer.tick()
    timer.reset()

    assert source.attached is timer
    assert source.detached == 1
    assert timer.destroyed
    assert not timer.is_active()
    assert timer.elapsed_ms() == 300
    assert timer.get_marks("a")[0].time == 300


def test_attach_after_destroy_is_ignored(timer):
    timer.destroy()
    source = RecordingSource()

    timer.attach(source)

    assert source.attached is None


def test_measure_between_marks(timer, clock):
    clock.advance(100)
    timer.mark("a")
    clock.advance(150)
    timer.mark("b")

    measure = timer.measure("x", "a", "b")

    assert (measure.name, measure.start_time, measure.duration) == ("x", 100, 150)
    assert timer.get_measures("x") == [measure]


def test_measure_against_unknown_mark_raises(timer):
    timer.mark("a")
    with pytest.raises(NotFoundError):
        timer.measure("x", "a", "missing")


@pytest.mark.parametrize(
    "kwargs",
    [
        {"tab_active_callbacks": ["not callable"]},
        {"tab_inactive_callbacks": [None]},
        {"absolute_callbacks": [(100, print)]},
        {"interval_callbacks": [IntervalCallback(100, print, 5)]},
    ],
)
def test_invalid_callback_entries_rejected(kwargs):
    with pytest.raises(ConfigurationError):
        EngagementTimer(**kwargs)


def test_fractional_cadence_goes_idle_after_whole_ticks(clock):
    timer = EngagementTimer(
        TimerSettings(idle_timeout_ms=0.8, check_callbacks_interval_ms=0.1), clock=clock
    )

    run_ticks(timer, clock, 7)
    assert timer.state is EngagementState.ACTIVE
    run_ticks(timer, clock, 1)
    assert timer.state is EngagementState.IDLE
