"""
Termination request handling.

SIGINT and SIGTERM are turned into a single call of the scheduler's cancel
callback. The handler does no I/O and touches no session state; it hands the
cancel call to a short-lived thread so that setting the event never runs
inside an Event.wait it interrupted on the main thread.
"""
import signal
import threading
from typing import Callable, Dict, Iterable, Optional

TERMINATION_SIGNALS = tuple(
    sig for sig in (getattr(signal, "SIGINT", None), getattr(signal, "SIGTERM", None)) if sig is not None
)


class TerminationListener:
    """Context manager that routes termination signals to a cancel callback"""

    def __init__(self, cancel: Callable[[], None], signals: Iterable[int] = TERMINATION_SIGNALS):
        self._cancel = cancel
        self._signals = tuple(signals)
        self._previous_handlers: Dict[int, object] = {}
        self._requested = False
        self._deliverer: Optional[threading.Thread] = None

    @property
    def requested(self) -> bool:
        return self._requested

    def install(self) -> "TerminationListener":
        """Install the handlers. Must be called from the main thread."""
        for sig in self._signals:
            self._previous_handlers[sig] = signal.signal(sig, self._handle)
        return self

    def uninstall(self) -> None:
        """Restore the handlers that were active before install()"""
        for sig, handler in self._previous_handlers.items():
            signal.signal(sig, handler)
        self._previous_handlers.clear()
        if self._deliverer is not None:
            self._deliverer.join(timeout=1.0)

    def _handle(self, signum, frame) -> None:
        # Only the first request per session has effect
        if self._requested:
            return
        self._requested = True
        self._deliverer = threading.Thread(target=self._cancel, name="termination-request", daemon=True)
        self._deliverer.start()

    def __enter__(self) -> "TerminationListener":
        return self.install()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.uninstall()
