import pytest

from colormatch.events.bus import EVENT_TICK
from colormatch.systems.timer_system import TimerSystem
from colormatch.utils.round_timer import CountdownTimer, DelayTimer, ElapsedTimer, ProgressTimer


def test_progress_timer_reports_fractions_then_completes():
    progress = []
    completed = []
    timer = ProgressTimer(
        duration=0.2,
        on_progress=progress.append,
        on_complete=lambda: completed.append(True),
        tick_interval=0.05,
    )

    for _ in range(4):
        timer.advance(0.05)

    assert progress == pytest.approx([0.25, 0.5, 0.75, 1.0])
    assert completed == [True]
    assert not timer.active

    timer.advance(1.0)
    assert completed == [True]


def test_progress_timer_cancelled_from_progress_callback_never_completes():
    completed = []
    timer = ProgressTimer(duration=0.1, on_complete=lambda: completed.append(True))
    timer.on_progress = lambda value: timer.cancel()

    timer.advance(0.5)

    assert completed == []


def test_countdown_reports_each_second_and_expires():
    seconds = []
    expired = []
    timer = CountdownTimer(seconds=3, on_second=seconds.append, on_expired=lambda: expired.append(True))

    timer.advance(0.5)
    assert seconds == []
    timer.advance(2.5)

    assert seconds == [2, 1, 0]
    assert expired == [True]
    assert timer.remaining == 0


def test_countdown_cancelled_mid_advance_stops_immediately():
    seconds = []
    timer = CountdownTimer(seconds=5)

    def on_second(remaining):
        seconds.append(remaining)
        timer.cancel()

    timer.on_second = on_second
    timer.advance(3.0)

    assert seconds == [4]


def test_elapsed_timer_counts_up_and_ignores_negative_dt():
    seconds = []
    timer = ElapsedTimer(on_second=seconds.append)

    timer.advance(1.5)
    timer.advance(-5.0)
    timer.advance(0.5)

    assert seconds == [1, 2]
    assert timer.elapsed == 2


def test_delay_timer_fires_once_with_args():
    calls = []
    timer = DelayTimer(delay=0.3, callback=lambda *args: calls.append(args), args=(1, "a"))

    timer.advance(0.2)
    assert calls == []
    timer.advance(0.1)
    timer.advance(1.0)

    assert calls == [(1, "a")]


def test_cancel_is_idempotent():
    calls = []
    timer = DelayTimer(delay=0.1, callback=lambda: calls.append(True))

    timer.cancel()
    timer.cancel()
    timer.advance(1.0)

    assert calls == []


def test_timer_system_runs_delays_on_tick(bus):
    timers = TimerSystem(bus)
    calls = []
    timers.delay(0.5, calls.append, "done")

    bus.emit(EVENT_TICK, dt=0.25)
    assert calls == []
    bus.emit(EVENT_TICK, dt=0.25)

    assert calls == ["done"]
    assert timers.pending_count == 0
    assert timers.now == pytest.approx(0.5)


def test_timer_system_cancel_by_token(bus):
    timers = TimerSystem(bus)
    calls = []
    token = timers.delay(0.1, calls.append, "never")

    timers.cancel(token)
    timers.cancel(token)
    timers.cancel(None)
    bus.emit(EVENT_TICK, dt=1.0)

    assert calls == []
    assert not timers.is_active(token)


def test_timer_cancelled_by_earlier_callback_in_same_tick_never_fires(bus):
    timers = TimerSystem(bus)
    calls = []
    tokens = {}

    def first():
        calls.append("first")
        timers.cancel(tokens["second"])

    timers.delay(0.1, first)
    tokens["second"] = timers.delay(0.1, calls.append, "second")

    bus.emit(EVENT_TICK, dt=0.2)

    assert calls == ["first"]


def test_timer_scheduled_during_tick_waits_for_next_tick(bus):
    timers = TimerSystem(bus)
    calls = []

    timers.delay(0.0, lambda: timers.delay(0.0, calls.append, "nested"))

    bus.emit(EVENT_TICK, dt=0.016)
    assert calls == []
    bus.emit(EVENT_TICK, dt=0.016)

    assert calls == ["nested"]


def test_timer_system_ignores_bad_dt(bus):
    timers = TimerSystem(bus)
    calls = []
    timers.delay(0.1, calls.append, "x")

    bus.emit(EVENT_TICK, dt="soon")
    bus.emit(EVENT_TICK, dt=-1.0)

    assert calls == []
    assert timers.now == 0.0
