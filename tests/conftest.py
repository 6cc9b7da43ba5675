import itertools
from pathlib import Path
from typing import List, Optional

import pytest

from proclog.config.session_config import SessionConfig
from proclog.consts.FirstSamplePolicy import FirstSamplePolicy
from proclog.service.monitor.process_monitor import MetricSource
from proclog.service.monitor.process_snapshot import ProcessCounters, ProcessSnapshot
from proclog.service.writer.record_writer import RecordWriter
from proclog.util.exceptions import RecordIOError

EPOCH = 1_700_000_000.0


class StubMetricSource(MetricSource):
    """Replays scripted frames; frame 0 is consumed by the baseline snapshot.

    A frame is a list of ProcessCounters or an exception to raise. The last
    frame repeats once the script runs out. The clock advances by `step`
    seconds per snapshot.
    """

    def __init__(self, frames, step: float = 1.0, start: float = EPOCH):
        times = itertools.count(start, step)
        super().__init__(clock=lambda: next(times))
        self.frames = list(frames)
        self.calls = 0

    def list_processes(self) -> List[ProcessCounters]:
        frame = self.frames[min(self.calls, len(self.frames) - 1)]
        self.calls += 1
        if isinstance(frame, Exception):
            raise frame
        return list(frame)


class SpyWriter(RecordWriter):
    """RecordWriter that counts finalize calls and can fail on the n-th row"""

    def __init__(self, path: Path, fail_on_row: Optional[int] = None):
        super().__init__(path)
        self.fail_on_row = fail_on_row
        self.finalize_calls = 0
        self.row_calls = 0

    def write_row(self, record) -> None:
        self.row_calls += 1
        if self.fail_on_row is not None and self.row_calls == self.fail_on_row:
            raise RecordIOError("No space left on device", operation="write_row")
        super().write_row(record)

    def finalize(self) -> None:
        self.finalize_calls += 1
        super().finalize()


def counters(pid: int, cpu: float, name: str = "worker", memory: int = 4096,
             create_time: Optional[float] = None) -> ProcessCounters:
    return ProcessCounters(pid=pid, name=name, cumulative_cpu_time=cpu,
                           resident_memory=memory, create_time=create_time)


@pytest.fixture
def make_counters():
    return counters


@pytest.fixture
def make_snapshot():
    def _make(pid: int = 100, cpu: float = 0.0, at: float = EPOCH, name: str = "worker",
              memory: int = 4096, create_time: Optional[float] = None) -> ProcessSnapshot:
        return ProcessSnapshot(pid=pid, name=name, cumulative_cpu_time=cpu,
                               resident_memory=memory, observed_at=at, create_time=create_time)
    return _make


@pytest.fixture
def output_path(tmp_path) -> Path:
    return tmp_path / "process_usage.csv"


@pytest.fixture
def fast_config(output_path):
    """Three ticks, 10 ms apart"""
    def _make(**kwargs) -> SessionConfig:
        values = dict(interval=0.01, duration=0.03, output_path=output_path,
                      first_sample=FirstSamplePolicy.ZERO)
        values.update(kwargs)
        return SessionConfig(**values)
    return _make


@pytest.fixture
def stub_source():
    return StubMetricSource


@pytest.fixture
def spy_writer():
    return SpyWriter
