"""Tests for exit classification."""

from __future__ import annotations

from pathlib import Path

import pytest

from loadtest_orchestrator.execution.cancellation import SchedulerExceptionType
from loadtest_orchestrator.execution.exit_code import (
    FORCE_KILLED_EXIT_CODE,
    OutcomeKind,
    classify_exit,
    normalize_exit_status,
)

RESULT = Path("results/t.jtl")
NONE = SchedulerExceptionType.NONE


class TestNormalizeExitStatus:
    def test_sigterm(self):
        assert normalize_exit_status(-15) == FORCE_KILLED_EXIT_CODE

    def test_sigkill(self):
        assert normalize_exit_status(-9) == 137

    def test_regular_codes_unchanged(self):
        assert normalize_exit_status(0) == 0
        assert normalize_exit_status(3) == 3


class TestClassifyExit:
    """Tests for classify_exit."""

    def test_success(self):
        outcome = classify_exit("t.jmx", 0, NONE, RESULT)
        assert outcome.kind is OutcomeKind.COMPLETED
        assert not outcome.is_fatal
        assert outcome.status == "passed"

    def test_non_zero_is_fatal(self):
        outcome = classify_exit("t.jmx", 1, NONE, RESULT)
        assert outcome.is_fatal
        assert outcome.status == "failed"

    def test_force_killed_tolerated(self):
        outcome = classify_exit("t.jmx", 143, NONE, RESULT, ignore_jvm_killed=True)
        assert outcome.kind is OutcomeKind.COMPLETED
        assert outcome.tolerated
        assert not outcome.is_fatal
        assert outcome.status == "tolerated"

    def test_force_killed_not_tolerated(self):
        outcome = classify_exit("t.jmx", 143, NONE, RESULT, ignore_jvm_killed=False)
        assert outcome.is_fatal

    def test_tolerance_only_applies_to_force_killed(self):
        outcome = classify_exit("t.jmx", 137, NONE, RESULT, ignore_jvm_killed=True)
        assert outcome.is_fatal

    @pytest.mark.parametrize("reason", [
        SchedulerExceptionType.KILL,
        SchedulerExceptionType.ABORT,
        SchedulerExceptionType.STOP,
    ])
    def test_cancellation_wins_over_exit_code(self, reason):
        """A cancelled test is never fatal, whatever its exit status."""
        outcome = classify_exit("t.jmx", 1, reason, RESULT)
        assert outcome.kind is OutcomeKind.CANCELLED_BY_SCHEDULER
        assert outcome.cancellation is reason
        assert not outcome.is_fatal
        assert outcome.status == f"cancelled:{reason.value}"
