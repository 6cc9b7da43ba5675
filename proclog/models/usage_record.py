from dataclasses import dataclass
from datetime import datetime

from proclog.service.monitor.process_snapshot import ProcessSnapshot


@dataclass(frozen=True)
class UsageRecord:
    """One output row: usage of one process at one tick"""
    timestamp: datetime
    pid: int
    name: str
    cpu_percent: float
    memory_bytes: int

    @classmethod
    def from_snapshot(cls, snapshot: ProcessSnapshot, cpu_percent: float) -> "UsageRecord":
        return cls(
            timestamp=datetime.fromtimestamp(snapshot.observed_at).astimezone(),
            pid=snapshot.pid,
            name=snapshot.name,
            cpu_percent=cpu_percent,
            memory_bytes=snapshot.resident_memory,
        )

    def to_row(self) -> list:
        """Field values in header order, formatted for the CSV output"""
        return [
            self.timestamp.isoformat(timespec="milliseconds"),
            self.pid,
            self.name,
            f"{self.cpu_percent:.2f}",
            int(self.memory_bytes),
        ]
