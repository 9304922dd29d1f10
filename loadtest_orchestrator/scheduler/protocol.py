"""Contract of the external event scheduler.

The scheduler owns a session that brackets the whole run.  The executor
starts it once a test process is live (so a kill-switch always has a
target), stops it after the last test and aborts it on failure.  Between
those calls the scheduler may cancel the running test through the
kill-switch it was handed.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable


class SchedulerExceptionHandler(Protocol):
    """Kill-switch the scheduler can invoke from any thread."""

    def kill(self, message: str) -> None: ...

    def abort(self, message: str) -> None: ...

    def stop(self, message: str) -> None: ...


@runtime_checkable
class EventScheduler(Protocol):
    """Session lifecycle and cancellation service."""

    def start_session(self) -> None: ...

    def stop_session(self) -> None: ...

    def abort_session(self) -> None: ...

    def add_kill_switch(self, handler: SchedulerExceptionHandler) -> None: ...

    def is_session_stopped(self) -> bool: ...


def scheduler_run_id(scheduler: EventScheduler | None) -> str | None:
    """Run identifier supplied by the scheduler, if it provides one."""
    if scheduler is None:
        return None
    getter = getattr(scheduler, "get_run_identifier", None)
    if getter is None:
        return None
    return getter()


class EventLogger:
    """Adapts a ``logging.Logger`` to the scheduler's logging callbacks."""

    def __init__(self, logger: logging.Logger, debug_enabled: bool = False) -> None:
        self._logger = logger
        self._debug_enabled = debug_enabled

    def info(self, message: str) -> None:
        self._logger.info(message)

    def warn(self, message: str) -> None:
        self._logger.warning(message)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        if exc is not None:
            self._logger.error(message, exc_info=exc)
        else:
            self._logger.error(message)

    def debug(self, message: str) -> None:
        if self.is_debug_enabled():
            self._logger.debug(message)

    def is_debug_enabled(self) -> bool:
        return self._debug_enabled
