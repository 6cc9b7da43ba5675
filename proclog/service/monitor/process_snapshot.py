from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ProcessCounters:
    """Raw counters of one process as reported by a MetricSource"""
    pid: int
    name: str
    cumulative_cpu_time: float  # seconds, user + system
    resident_memory: int        # bytes
    create_time: Optional[float] = None


@dataclass(frozen=True)
class ProcessSnapshot:
    """Single process observation captured at one tick"""
    pid: int
    name: str
    cumulative_cpu_time: float
    resident_memory: int
    observed_at: float          # epoch seconds, shared by the whole enumeration
    create_time: Optional[float] = None

    @classmethod
    def from_counters(cls, counters: ProcessCounters, observed_at: float) -> "ProcessSnapshot":
        return cls(
            pid=counters.pid,
            name=counters.name,
            cumulative_cpu_time=counters.cumulative_cpu_time,
            resident_memory=counters.resident_memory,
            observed_at=observed_at,
            create_time=counters.create_time,
        )
