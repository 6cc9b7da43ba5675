"""
Record Writer Module

Appends usage rows to a CSV file. Each row is formatted completely in memory
and handed to an unbuffered file in one write, and the writer remembers the
offset of the last complete row. If a write fails, finalize() truncates the
file back to that offset, so the file on disk never ends in a partial row.
"""
import csv
import io
import os
from pathlib import Path
from typing import Optional, Sequence

from proclog.models.usage_record import UsageRecord
from proclog.util.exceptions import RecordIOError
from proclog.util.log_config import setup_logger

logger = setup_logger(__name__)

HEADER = ["timestamp", "pid", "name", "cpu_usage", "memory_usage"]


class RecordWriter:
    """Header-first, append-only CSV writer with a single finalize"""

    def __init__(self, path: Path):
        self.path = Path(path)
        self.rows_written = 0
        self._handle: Optional[io.RawIOBase] = None
        self._committed = 0
        self._header_written = False
        self._failed = False
        self._finalized = False

    @property
    def is_open(self) -> bool:
        return self._handle is not None

    def open(self) -> "RecordWriter":
        """
        Create or truncate the output file.

        Raises:
            RecordIOError: if the path cannot be created or is not writable
        """
        if self._handle is not None or self._finalized:
            raise RuntimeError(f"Writer for {self.path} was already opened")
        logger.info(f"Creating CSV file: {self.path}")
        try:
            self._handle = open(self.path, "wb", buffering=0)
        except OSError as e:
            raise RecordIOError(f"Failed to create {self.path}: {e}", operation="open") from e
        return self

    def write_header(self) -> None:
        """Write the header row. Must be called exactly once, before any row."""
        if self._header_written:
            raise RuntimeError("Header was already written")
        self._write_line(HEADER, operation="write_header")
        self._header_written = True

    def write_row(self, record: UsageRecord) -> None:
        """
        Append one record.

        Raises:
            RecordIOError: if the underlying write fails
        """
        if not self._header_written:
            raise RuntimeError("write_header() must be called before write_row()")
        self._write_line(record.to_row(), operation="write_row")
        self.rows_written += 1

    def finalize(self) -> None:
        """
        Flush to disk and close the file. Runs its I/O exactly once; later
        calls return without touching the file.

        Raises:
            RecordIOError: if the file cannot be synced or closed
        """
        if self._finalized:
            logger.debug(f"Writer for {self.path} already finalized")
            return
        self._finalized = True
        handle, self._handle = self._handle, None
        if handle is None:
            return

        try:
            if self._failed:
                # Drop whatever part of the failed row reached the file
                handle.truncate(self._committed)
            os.fsync(handle.fileno())
        except OSError as e:
            raise RecordIOError(f"Failed to flush {self.path}: {e}", operation="finalize") from e
        finally:
            try:
                handle.close()
            except OSError as e:
                logger.error(f"Failed to close {self.path}: {e}")
        logger.info(f"CSV file closed: {self.path} ({self.rows_written} rows)")

    def _write_line(self, fields: Sequence, operation: str) -> None:
        if self._handle is None:
            raise RuntimeError(f"Writer for {self.path} is not open")
        if self._failed:
            raise RecordIOError(f"{self.path} is no longer writable after an earlier failure",
                                operation=operation)

        data = _format_line(fields)
        written = 0
        try:
            while written < len(data):
                count = self._handle.write(data[written:])
                if not count:
                    raise OSError(f"short write ({written}/{len(data)} bytes)")
                written += count
        except OSError as e:
            self._failed = True
            raise RecordIOError(f"Failed to write to {self.path}: {e}", operation=operation) from e
        self._committed += written


def _format_line(fields: Sequence) -> bytes:
    """
    Render one CSV line with standard quoting (embedded quotes doubled).
    Lone surrogates from undecodable process names are written backslash-escaped.
    """
    buffer = io.StringIO()
    csv.writer(buffer, lineterminator="\n").writerow(fields)
    return buffer.getvalue().encode("utf-8", errors="backslashreplace")
