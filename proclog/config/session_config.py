"""
Session configuration data class.

Immutable for the life of a session; validate() is called in the Starting
state before anything is written.
"""
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from proclog.consts.FirstSamplePolicy import FirstSamplePolicy
from proclog.util.exceptions import ConfigError

DEFAULT_INTERVAL = 1.0
DEFAULT_DURATION = 60.0
DEFAULT_OUTPUT = "process_usage.csv"


@dataclass(frozen=True)
class SessionConfig:

    interval: float = DEFAULT_INTERVAL
    duration: Optional[float] = DEFAULT_DURATION  # None runs until cancelled
    output_path: Path = Path(DEFAULT_OUTPUT)
    first_sample: FirstSamplePolicy = FirstSamplePolicy.ZERO

    @property
    def unbounded(self) -> bool:
        return self.duration is None

    def validate(self) -> "SessionConfig":
        """
        Check interval, duration and output path.

        Raises:
            ConfigError: on the first invalid value
        """
        if not _is_positive_number(self.interval):
            raise ConfigError(f"Interval must be a positive number of seconds, got {self.interval!r}",
                              operation="validate")
        if self.duration is not None and not _is_positive_number(self.duration):
            raise ConfigError(f"Duration must be a positive number of seconds or unbounded, got {self.duration!r}",
                              operation="validate")
        if not str(self.output_path).strip():
            raise ConfigError("Output path must not be empty", operation="validate")
        if Path(self.output_path).is_dir():
            raise ConfigError(f"Output path is a directory: {self.output_path}", operation="validate")
        if not isinstance(self.first_sample, FirstSamplePolicy):
            raise ConfigError(f"Unknown first-sample policy: {self.first_sample!r}", operation="validate")
        return self

    def __str__(self):
        duration = "until cancelled" if self.unbounded else f"{self.duration}s"
        return (f"SessionConfig(interval={self.interval}s, duration={duration}, "
                f"output={self.output_path}, first_sample={self.first_sample.value})")


def _is_positive_number(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value) and value > 0
