"""
Sample Scheduler Module

Drives the sampling cadence of a session. Ticks fall on a fixed grid
(start + k * interval) so slow ticks do not accumulate drift, and every
wait can be cut short by a single cancellation event.
"""
import math
import threading
import time
from typing import Callable, Optional

from proclog.consts.TickDecision import TickDecision
from proclog.util.exceptions import ConfigError
from proclog.util.log_config import setup_logger

logger = setup_logger(__name__)

# Absorbs float error in duration / interval, e.g. 0.3 / 0.1
TICK_EPSILON = 1e-9


class SampleScheduler:
    """Fixed-interval tick source bounded by an optional duration ceiling"""

    def __init__(
        self,
        interval: float,
        duration: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the scheduler.

        Args:
            interval: Seconds between ticks, must be positive
            duration: Session ceiling in seconds, or None to run until cancelled
            clock: Monotonic clock used to measure elapsed time
        """
        if interval <= 0:
            raise ConfigError(f"Interval must be positive, got {interval}")
        if duration is not None and duration <= 0:
            raise ConfigError(f"Duration must be positive, got {duration}")
        self.interval = interval
        self.duration = duration
        self._clock = clock
        self._cancel_event = threading.Event()
        self._start_time: Optional[float] = None
        self._ticks = 0

    def start(self) -> None:
        """Mark the session start; elapsed time and tick deadlines count from here"""
        self._start_time = self._clock()
        self._ticks = 0

    @property
    def elapsed(self) -> float:
        if self._start_time is None:
            return 0.0
        return self._clock() - self._start_time

    @property
    def ticks(self) -> int:
        return self._ticks

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def cancel(self) -> None:
        """Request a stop. Safe to call any number of times from any thread."""
        self._cancel_event.set()

    def wait_for_next_tick(self) -> TickDecision:
        """
        Block until the next tick is due or cancellation arrives.

        Returns:
            TickDecision.CONTINUE when a tick should run, TickDecision.STOP when
            the session was cancelled or the duration ceiling was reached

        Raises:
            ConfigError: if the underlying timed wait cannot be performed
        """
        if self._start_time is None:
            self.start()

        if self.cancelled or self._duration_reached():
            return TickDecision.STOP

        next_tick = self._ticks + 1
        past_ceiling = self.duration is not None and next_tick > self._max_ticks()
        deadline = self.duration if past_ceiling else next_tick * self.interval
        timeout = max(0.0, deadline - self.elapsed)
        if timeout == 0.0 and not past_ceiling:
            logger.debug(f"Tick {next_tick} is late by {self.elapsed - deadline:.3f}s")

        try:
            interrupted = self._cancel_event.wait(timeout)
        except (OverflowError, OSError) as e:
            raise ConfigError(f"Timed wait of {timeout}s failed: {e}",
                              operation="wait_for_next_tick") from e

        if interrupted or past_ceiling:
            return TickDecision.STOP

        # A tick due exactly at the duration still runs, even if the wake-up lands just past it
        self._ticks = next_tick
        return TickDecision.CONTINUE

    def _duration_reached(self) -> bool:
        return self.duration is not None and self.elapsed >= self.duration

    def _max_ticks(self) -> int:
        """Number of ticks whose deadline falls within the duration ceiling"""
        return int(math.floor(self.duration / self.interval + TICK_EPSILON))
