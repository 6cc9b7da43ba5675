from dataclasses import dataclass, fields
from typing import Optional, Union

from proclog.config.session_config import DEFAULT_DURATION, DEFAULT_INTERVAL, DEFAULT_OUTPUT

UNTIL_CANCELLED = "until-cancelled"


@dataclass
class LoggerSettings:
    """Raw settings as read from YAML, before CLI overrides and validation"""
    interval: float = DEFAULT_INTERVAL
    duration: Union[float, str, None] = DEFAULT_DURATION
    output: str = DEFAULT_OUTPUT
    first_sample: str = "zero"
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @classmethod
    def field_names(cls):
        return [f.name for f in fields(cls)]
