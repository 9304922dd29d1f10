"""External event scheduler contract consumed by the executor."""

from loadtest_orchestrator.scheduler.protocol import (
    EventLogger,
    EventScheduler,
    SchedulerExceptionHandler,
    scheduler_run_id,
)

__all__ = [
    "EventLogger",
    "EventScheduler",
    "SchedulerExceptionHandler",
    "scheduler_run_id",
]
