"""Models for process logger data structures."""

from .session_result import SessionResult
from .usage_record import UsageRecord

__all__ = ["SessionResult", "UsageRecord"]
