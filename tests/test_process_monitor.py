import os

import psutil
import pytest

from proclog.service.monitor import process_monitor
from proclog.service.monitor.process_monitor import PsutilMetricSource
from proclog.util.exceptions import EnumerationError


def test_snapshot_includes_current_process():
    snapshots = PsutilMetricSource().snapshot()
    by_pid = {s.pid: s for s in snapshots}

    me = by_pid[os.getpid()]
    assert me.name
    assert me.resident_memory > 0
    assert me.cumulative_cpu_time >= 0.0
    assert me.create_time == pytest.approx(psutil.Process().create_time())


def test_snapshot_shares_one_observation_time():
    snapshots = PsutilMetricSource(clock=lambda: 123.0).snapshot()

    assert snapshots
    assert {s.observed_at for s in snapshots} == {123.0}
    assert len({s.pid for s in snapshots}) == len(snapshots)


def test_enumeration_failure_is_wrapped(monkeypatch):
    def broken_iter(*args, **kwargs):
        raise psutil.AccessDenied()

    monkeypatch.setattr(process_monitor.psutil, "process_iter", broken_iter)

    with pytest.raises(EnumerationError) as excinfo:
        PsutilMetricSource().snapshot()
    assert excinfo.value.operation == "list_processes"


def test_duplicate_pids_keep_first_entry(stub_source, make_counters):
    source = stub_source([[make_counters(5, 1.0, name="first"), make_counters(5, 2.0, name="second")]])

    snapshots = source.snapshot()

    assert [s.name for s in snapshots] == ["first"]
