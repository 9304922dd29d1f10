"""Kill-switch handed to the external scheduler.

The scheduler may call ``kill``, ``abort`` or ``stop`` from any thread while
a test process is running.  Each records why the process was terminated in
a ``CancellationState`` and terminates the process; only the first call per
execution has any effect, and calls after the process has been waited on
are ignored.
"""

from __future__ import annotations

import enum
import logging
import subprocess
import threading

log = logging.getLogger(__name__)


class SchedulerExceptionType(enum.Enum):
    """Reason the scheduler cancelled a running test."""

    NONE = "none"
    KILL = "kill"
    ABORT = "abort"
    STOP = "stop"


class CancellationState:
    """Single-assignment cell written by the kill-switch, read by the supervisor.

    Transitions only from NONE to one of KILL, ABORT, STOP, and only until
    the cell is closed.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._reason = SchedulerExceptionType.NONE
        self._closed = False

    @property
    def reason(self) -> SchedulerExceptionType:
        with self._lock:
            return self._reason

    @property
    def cancelled(self) -> bool:
        return self.reason is not SchedulerExceptionType.NONE

    def trip(self, reason: SchedulerExceptionType) -> bool:
        """Record *reason* if nothing was recorded yet.

        Returns:
            True if this call set the state, False if it was already set
            or the state is closed.
        """
        if reason is SchedulerExceptionType.NONE:
            raise ValueError("Cannot trip cancellation state with NONE")
        with self._lock:
            if self._closed or self._reason is not SchedulerExceptionType.NONE:
                return False
            self._reason = reason
            return True

    def close(self) -> None:
        """Freeze the current reason; later trips are ignored."""
        with self._lock:
            self._closed = True

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._closed


class KillSwitch:
    """Scheduler exception handler bound to one running process."""

    def __init__(self, process: subprocess.Popen, state: CancellationState) -> None:
        self.process = process
        self.state = state

    def kill(self, message: str) -> None:
        self._trigger(SchedulerExceptionType.KILL, "Killing running process", message)

    def abort(self, message: str) -> None:
        self._trigger(SchedulerExceptionType.ABORT, "Killing running process", message)

    def stop(self, message: str) -> None:
        self._trigger(SchedulerExceptionType.STOP, "Stop running process", message)

    def _trigger(self, reason: SchedulerExceptionType, action: str, message: str) -> None:
        if not self.state.trip(reason):
            log.debug("Ignoring scheduler %s, process already cancelled or finished", reason.value)
            return
        log.info("%s, message: %s", action, message)
        try:
            self.process.terminate()
        except ProcessLookupError:
            # Exited between the poll and the signal.
            pass
