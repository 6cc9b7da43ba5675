import dataclasses
from datetime import datetime
from pathlib import Path
from typing import Optional

from proclog.consts.SessionState import SessionState
from proclog.util.exceptions import ProcessLoggerError


@dataclasses.dataclass
class SessionResult:
    """Outcome of one capture session"""
    state: SessionState
    output_path: Path
    started_at: Optional[datetime] = None
    ticks: int = 0
    rows_written: int = 0
    elapsed: float = 0.0
    cancelled: bool = False
    error: Optional[ProcessLoggerError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def outcome(self) -> str:
        if self.error is not None:
            return "failed"
        return "cancelled" if self.cancelled else "completed"

    def to_dict(self):
        """Convert to dictionary for JSON serialization"""
        return {
            "state": self.state.value,
            "outcome": self.outcome,
            "output_path": str(self.output_path),
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "ticks": self.ticks,
            "rows_written": self.rows_written,
            "elapsed": self.elapsed,
            "cancelled": self.cancelled,
            "error": str(self.error) if self.error else None,
        }
