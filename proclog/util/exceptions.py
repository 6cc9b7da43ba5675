"""
Error kinds raised by the process logger.

All of them are fatal for the session; none are retried.
"""
from typing import Optional


class ProcessLoggerError(Exception):
    """Base error carrying the tick and operation it happened in."""

    def __init__(self, message: str, tick: Optional[int] = None, operation: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.tick = tick
        self.operation = operation

    def with_context(self, tick: Optional[int] = None, operation: Optional[str] = None) -> "ProcessLoggerError":
        """Fill in missing context and return self so it can be re-raised."""
        if self.tick is None:
            self.tick = tick
        if self.operation is None:
            self.operation = operation
        return self

    def __str__(self) -> str:
        context = []
        if self.tick is not None:
            context.append(f"tick {self.tick}")
        if self.operation:
            context.append(self.operation)
        if not context:
            return self.message
        return f"[{', '.join(context)}] {self.message}"


class ConfigError(ProcessLoggerError):
    """Invalid interval, duration, path or configuration file."""


class EnumerationError(ProcessLoggerError):
    """The host could not be queried for its process list."""


class RecordIOError(ProcessLoggerError):
    """The output file could not be opened, written or closed."""
