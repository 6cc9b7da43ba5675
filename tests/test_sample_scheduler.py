import threading
import time

import pytest

from proclog.consts.TickDecision import TickDecision
from proclog.service.scheduler.sample_scheduler import SampleScheduler
from proclog.util.exceptions import ConfigError


def count_ticks(scheduler: SampleScheduler, limit: int = 100) -> int:
    ticks = 0
    while scheduler.wait_for_next_tick() is TickDecision.CONTINUE:
        ticks += 1
        assert ticks <= limit
    return ticks


@pytest.mark.parametrize("interval, duration", [(0, 1), (-1, 1), (1, 0), (1, -5)])
def test_rejects_non_positive_values(interval, duration):
    with pytest.raises(ConfigError):
        SampleScheduler(interval, duration)


def test_ticks_until_duration_ceiling():
    scheduler = SampleScheduler(interval=0.02, duration=0.1)
    scheduler.start()

    assert count_ticks(scheduler) == 5
    assert scheduler.ticks == 5
    assert scheduler.elapsed >= 0.09


def test_float_ratio_does_not_lose_last_tick():
    scheduler = SampleScheduler(interval=0.01, duration=0.03)
    scheduler.start()

    assert count_ticks(scheduler) == 3


def test_stop_is_sticky_after_duration():
    scheduler = SampleScheduler(interval=0.01, duration=0.02)
    scheduler.start()
    count_ticks(scheduler)

    assert scheduler.wait_for_next_tick() is TickDecision.STOP
    assert scheduler.wait_for_next_tick() is TickDecision.STOP


def test_interval_longer_than_duration_stops_at_duration():
    scheduler = SampleScheduler(interval=30.0, duration=0.05)
    scheduler.start()
    started = time.monotonic()

    assert scheduler.wait_for_next_tick() is TickDecision.STOP
    assert time.monotonic() - started < 5.0
    assert scheduler.ticks == 0


def test_cancel_before_wait_stops_immediately():
    scheduler = SampleScheduler(interval=60.0)
    scheduler.start()
    scheduler.cancel()
    started = time.monotonic()

    assert scheduler.wait_for_next_tick() is TickDecision.STOP
    assert time.monotonic() - started < 1.0


def test_cancel_interrupts_long_wait():
    scheduler = SampleScheduler(interval=60.0, duration=None)
    scheduler.start()
    timer = threading.Timer(0.2, scheduler.cancel)
    timer.start()
    started = time.monotonic()
    try:
        decision = scheduler.wait_for_next_tick()
    finally:
        timer.cancel()

    assert decision is TickDecision.STOP
    assert time.monotonic() - started < 5.0
    assert scheduler.cancelled


def test_cancel_is_idempotent():
    scheduler = SampleScheduler(interval=0.01, duration=None)
    scheduler.start()
    for _ in range(3):
        scheduler.cancel()

    assert scheduler.cancelled
    assert scheduler.wait_for_next_tick() is TickDecision.STOP
    assert scheduler.wait_for_next_tick() is TickDecision.STOP


def test_unbounded_runs_until_cancelled():
    scheduler = SampleScheduler(interval=0.01, duration=None)
    scheduler.start()
    for _ in range(4):
        assert scheduler.wait_for_next_tick() is TickDecision.CONTINUE

    scheduler.cancel()

    assert scheduler.wait_for_next_tick() is TickDecision.STOP
    assert scheduler.ticks == 4


def test_late_tick_fires_without_waiting():
    scheduler = SampleScheduler(interval=0.05, duration=None)
    scheduler.start()
    time.sleep(0.12)
    started = time.monotonic()

    assert scheduler.wait_for_next_tick() is TickDecision.CONTINUE
    assert time.monotonic() - started < 0.04


def test_wait_starts_scheduler_implicitly():
    scheduler = SampleScheduler(interval=0.01, duration=0.01)

    assert scheduler.wait_for_next_tick() is TickDecision.CONTINUE
    assert scheduler.wait_for_next_tick() is TickDecision.STOP


def test_timer_failure_is_a_config_error():
    scheduler = SampleScheduler(interval=threading.TIMEOUT_MAX * 10, duration=None)
    scheduler.start()

    with pytest.raises(ConfigError):
        scheduler.wait_for_next_tick()
