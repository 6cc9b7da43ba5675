import math
from typing import Optional

from proclog.consts.FirstSamplePolicy import FirstSamplePolicy
from proclog.service.monitor.process_snapshot import ProcessSnapshot


class UsageCalculator:
    """Derive CPU usage percentages from two cumulative CPU-time observations"""

    def __init__(self, first_sample: FirstSamplePolicy = FirstSamplePolicy.ZERO):
        self.first_sample = first_sample

    def compute(self, current: ProcessSnapshot, previous: Optional[ProcessSnapshot]) -> Optional[float]:
        """
        Compute CPU usage of `current` relative to one logical core.

        Args:
            current: Snapshot from this tick
            previous: Snapshot of the same pid from the previous tick, if any

        Returns:
            Percentage (may exceed 100 on multi-core usage), or None when the
            first-sample policy says the process is not reported yet
        """
        if previous is None or self._is_new_process(current, previous):
            return self._first_sample_value()

        elapsed = current.observed_at - previous.observed_at
        if elapsed <= 0:
            # Clock went backwards or did not move
            return 0.0

        percent = (current.cumulative_cpu_time - previous.cumulative_cpu_time) / elapsed * 100
        if not math.isfinite(percent):
            return 0.0
        return percent

    def _first_sample_value(self) -> Optional[float]:
        if self.first_sample is FirstSamplePolicy.SKIP:
            return None
        return 0.0

    @staticmethod
    def _is_new_process(current: ProcessSnapshot, previous: ProcessSnapshot) -> bool:
        """A counter reset or a different start time means the pid was reused"""
        if current.cumulative_cpu_time < previous.cumulative_cpu_time:
            return True
        return (current.create_time is not None
                and previous.create_time is not None
                and current.create_time != previous.create_time)
