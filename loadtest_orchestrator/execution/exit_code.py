"""Classification of a finished test process.

Combines the process exit status with the scheduler cancellation state:

    +----------------------+-------------------+-------------------------+
    | cancellation         | exit status       | outcome                 |
    +----------------------+-------------------+-------------------------+
    | KILL / ABORT / STOP  | (any)             | cancelled, not an error |
    | NONE                 | 0                 | completed               |
    | NONE                 | 143, tolerated    | completed with warning  |
    | NONE                 | other non-zero    | fatal                   |
    +----------------------+-------------------+-------------------------+

Processes that die from a signal report a negative return code through
``subprocess``; ``normalize_exit_status`` maps those to the shell
convention ``128 + signal`` so a SIGTERM'd engine reads as 143.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from pathlib import Path

from loadtest_orchestrator.execution.cancellation import SchedulerExceptionType

# Exit status of a process terminated with SIGTERM (128 + 15).
FORCE_KILLED_EXIT_CODE = 143


class OutcomeKind(enum.Enum):
    COMPLETED = "completed"
    CANCELLED_BY_SCHEDULER = "cancelled_by_scheduler"
    INTERRUPTED_BY_HOST = "interrupted_by_host"


@dataclass(frozen=True)
class ExecutionOutcome:
    """How one test execution ended."""

    test: str
    kind: OutcomeKind
    result_file: Path
    exit_code: int | None = None
    cancellation: SchedulerExceptionType = SchedulerExceptionType.NONE
    tolerated: bool = False

    @property
    def is_fatal(self) -> bool:
        """True for a completed run with an untolerated non-zero status."""
        return (
            self.kind is OutcomeKind.COMPLETED
            and self.exit_code != 0
            and not self.tolerated
        )

    @property
    def status(self) -> str:
        if self.kind is OutcomeKind.CANCELLED_BY_SCHEDULER:
            return f"cancelled:{self.cancellation.value}"
        if self.kind is OutcomeKind.INTERRUPTED_BY_HOST:
            return "interrupted"
        if self.exit_code == 0:
            return "passed"
        return "tolerated" if self.tolerated else "failed"


def normalize_exit_status(returncode: int) -> int:
    """Map ``-signal`` return codes to ``128 + signal``."""
    if returncode < 0:
        return 128 - returncode
    return returncode


def classify_exit(
    test: str,
    exit_code: int,
    cancellation: SchedulerExceptionType,
    result_file: Path,
    ignore_jvm_killed: bool = False,
) -> ExecutionOutcome:
    """Classify a finished process.

    Args:
        test: Relative path of the test definition.
        exit_code: Normalised exit status.
        cancellation: State recorded by the kill-switch, read once.
        result_file: Result artifact path for the test.
        ignore_jvm_killed: Tolerate ``FORCE_KILLED_EXIT_CODE``.

    Returns:
        ExecutionOutcome; check ``is_fatal`` to decide whether to abort.
    """
    if cancellation is not SchedulerExceptionType.NONE:
        return ExecutionOutcome(
            test=test,
            kind=OutcomeKind.CANCELLED_BY_SCHEDULER,
            result_file=result_file,
            exit_code=exit_code,
            cancellation=cancellation,
        )
    tolerated = ignore_jvm_killed and exit_code == FORCE_KILLED_EXIT_CODE
    return ExecutionOutcome(
        test=test,
        kind=OutcomeKind.COMPLETED,
        result_file=result_file,
        exit_code=exit_code,
        tolerated=tolerated,
    )
