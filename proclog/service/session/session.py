"""
Capture Session Module

Orchestrates one capture session: Starting -> Running -> Stopping -> Stopped.
Each tick takes a snapshot from the MetricSource, derives CPU usage against
the previous snapshot, writes one row per process and replaces the previous
state. The writer is finalized exactly once on every exit path.

A baseline snapshot is taken while Starting and never written, so processes
alive at start report real usage on their first row. Only processes that
appear after the baseline get the first-sample policy value (0.0 by default).
"""
import time
from datetime import datetime
from typing import Dict, List, Optional

from proclog.config.session_config import SessionConfig
from proclog.consts.SessionState import SessionState
from proclog.consts.TickDecision import TickDecision
from proclog.models.session_result import SessionResult
from proclog.models.usage_record import UsageRecord
from proclog.service.monitor.process_monitor import MetricSource
from proclog.service.monitor.process_snapshot import ProcessSnapshot
from proclog.service.monitor.usage_calculator import UsageCalculator
from proclog.service.scheduler.sample_scheduler import SampleScheduler
from proclog.service.writer.record_writer import RecordWriter
from proclog.util.exceptions import ProcessLoggerError, RecordIOError
from proclog.util.log_config import setup_logger

logger = setup_logger(__name__)


class Session:
    def __init__(
        self,
        config: SessionConfig,
        source: MetricSource,
        scheduler: Optional[SampleScheduler] = None,
        writer: Optional[RecordWriter] = None,
        calculator: Optional[UsageCalculator] = None,
    ) -> None:
        self.config = config
        self.source = source
        self._scheduler = scheduler
        self._writer = writer
        self.calculator = calculator or UsageCalculator(config.first_sample)
        self.state = SessionState.STARTING
        self._previous: Dict[int, ProcessSnapshot] = {}
        self._ticks = 0
        self._started_at: Optional[datetime] = None
        self._started_clock: Optional[float] = None

    @property
    def scheduler(self) -> Optional[SampleScheduler]:
        return self._scheduler

    @property
    def writer(self) -> Optional[RecordWriter]:
        return self._writer

    def run(self) -> SessionResult:
        """
        Run the session to completion.

        Returns:
            SessionResult whose `error` is set when the session failed
        """
        self.state = SessionState.STARTING
        self._started_at = datetime.now().astimezone()
        self._started_clock = time.monotonic()

        try:
            self._start()
        except ProcessLoggerError as e:
            logger.error(f"Session failed to start: {e}")
            self._close_after_startup_failure()
            self.state = SessionState.STOPPED
            return self._result(e)

        self.state = SessionState.RUNNING
        duration = "until cancelled" if self.config.unbounded else f"{self.config.duration}s"
        logger.info(f"Writing process information every {self.config.interval}s for {duration}...")

        error: Optional[ProcessLoggerError] = None
        try:
            while self._scheduler.wait_for_next_tick() is TickDecision.CONTINUE:
                self._tick()
        except ProcessLoggerError as e:
            error = e.with_context(tick=self._ticks)
            logger.error(f"Process logging interrupted: {error}")
        finally:
            self.state = SessionState.STOPPING
            error = self._finalize(error)
            self.state = SessionState.STOPPED

        if error is None:
            if self._scheduler.cancelled:
                logger.info("Termination requested, stopped gracefully")
            logger.info("Process information gathered!")
        return self._result(error)

    def _start(self) -> None:
        self.config.validate()
        if self._scheduler is None:
            self._scheduler = SampleScheduler(self.config.interval, self.config.duration)
        if self._writer is None:
            self._writer = RecordWriter(self.config.output_path)

        self._writer.open()
        self._writer.write_header()

        # Baseline: every process seen here has a previous observation on tick 1
        try:
            self._previous = self._index(self.source.snapshot())
        except ProcessLoggerError as e:
            raise e.with_context(tick=0, operation="baseline snapshot")
        logger.debug(f"Baseline snapshot: {len(self._previous)} processes")
        self._scheduler.start()

    def _tick(self) -> None:
        self._ticks += 1
        tick = self._ticks
        try:
            snapshots = self.source.snapshot()
        except ProcessLoggerError as e:
            raise e.with_context(tick=tick, operation="snapshot")

        rows = 0
        for snapshot in snapshots:
            cpu_percent = self.calculator.compute(snapshot, self._previous.get(snapshot.pid))
            if cpu_percent is None:
                continue
            try:
                self._writer.write_row(UsageRecord.from_snapshot(snapshot, cpu_percent))
            except ProcessLoggerError as e:
                raise e.with_context(tick=tick, operation=f"write_row pid={snapshot.pid}")
            rows += 1

        # Exited processes drop out here
        self._previous = self._index(snapshots)
        logger.debug(f"Tick {tick}: {rows} rows from {len(snapshots)} processes")

    def _finalize(self, error: Optional[ProcessLoggerError]) -> Optional[ProcessLoggerError]:
        try:
            self._writer.finalize()
        except RecordIOError as e:
            if error is None:
                return e.with_context(tick=self._ticks)
            logger.error(f"Finalize after failure also failed: {e}")
        return error

    def _close_after_startup_failure(self) -> None:
        if self._writer is None or not self._writer.is_open:
            return
        try:
            self._writer.finalize()
        except RecordIOError as e:
            logger.error(f"Failed to close output after startup failure: {e}")

    @staticmethod
    def _index(snapshots: List[ProcessSnapshot]) -> Dict[int, ProcessSnapshot]:
        return {snapshot.pid: snapshot for snapshot in snapshots}

    def _result(self, error: Optional[ProcessLoggerError]) -> SessionResult:
        return SessionResult(
            state=self.state,
            output_path=self.config.output_path,
            started_at=self._started_at,
            ticks=self._ticks,
            rows_written=self._writer.rows_written if self._writer else 0,
            elapsed=time.monotonic() - self._started_clock if self._started_clock else 0.0,
            cancelled=bool(self._scheduler and self._scheduler.cancelled),
            error=error,
        )
