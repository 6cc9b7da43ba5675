"""
Process Monitor Module

This module enumerates live processes on the host together with their raw
CPU and memory counters. CPU usage is never read directly; it is derived
from successive snapshots by the UsageCalculator.
"""
import time
from abc import ABC, abstractmethod
from typing import Callable, List

import psutil

from proclog.service.monitor.process_snapshot import ProcessCounters, ProcessSnapshot
from proclog.util.exceptions import EnumerationError
from proclog.util.log_config import setup_logger

logger = setup_logger(__name__)

PROCESS_ATTRS = ["pid", "name", "cpu_times", "memory_info", "create_time"]


class MetricSource(ABC):
    """Abstract source of process counters.

    Subclasses implement list_processes; snapshot() stamps the whole
    enumeration with a single observation time.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock

    def snapshot(self) -> List[ProcessSnapshot]:
        """
        Enumerate processes and return one snapshot per pid.

        Raises:
            EnumerationError: if the host cannot be queried
        """
        counters = self.list_processes()
        observed_at = self._clock()

        snapshots = []
        seen = set()
        for item in counters:
            if item.pid in seen:
                logger.debug(f"Duplicate pid {item.pid} in enumeration, keeping first entry")
                continue
            seen.add(item.pid)
            snapshots.append(ProcessSnapshot.from_counters(item, observed_at))
        return snapshots

    @abstractmethod
    def list_processes(self) -> List[ProcessCounters]:
        """
        Return the counters of every live process, taken at a single instant.
        Implementations raise EnumerationError when the host cannot be queried.
        """
        pass


class PsutilMetricSource(MetricSource):
    """MetricSource backed by psutil.process_iter"""

    def list_processes(self) -> List[ProcessCounters]:
        processes = []
        unreadable = 0
        try:
            for proc in psutil.process_iter(attrs=PROCESS_ATTRS, ad_value=None):
                info = proc.info
                cpu_times = info.get("cpu_times")
                memory_info = info.get("memory_info")
                if cpu_times is None or memory_info is None:
                    # Access denied or zombie: counters unavailable
                    unreadable += 1
                    continue
                processes.append(ProcessCounters(
                    pid=info["pid"],
                    name=info.get("name") or "",
                    cumulative_cpu_time=cpu_times.user + cpu_times.system,
                    resident_memory=memory_info.rss,
                    create_time=info.get("create_time"),
                ))
        except (psutil.Error, OSError) as e:
            raise EnumerationError(f"Failed to enumerate processes: {e}", operation="list_processes") from e

        if unreadable:
            logger.debug(f"Skipped {unreadable} process(es) with unreadable counters")
        return processes
