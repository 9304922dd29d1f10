"""Errors that escape a test run.

Only configuration faults and untolerated test failures are raised out of
the executor; cancellations and host interruptions are recorded as
outcomes instead.
"""

from __future__ import annotations


class OrchestratorError(RuntimeError):
    """Base class for errors that abort a run."""


class ConfigurationError(OrchestratorError):
    """The run could not be prepared (result path, report dir, launch)."""


class TestExecutionError(OrchestratorError):
    """A test process exited with an untolerated non-zero status."""

    __test__ = False

    def __init__(self, test: str, exit_code: int) -> None:
        self.test = test
        self.exit_code = exit_code
        super().__init__(f"Test {test} failed with exit code: {exit_code}")
