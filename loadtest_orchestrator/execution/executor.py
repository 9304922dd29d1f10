"""Sequential test executor.

Runs every discovered test definition, one process at a time, in
discovery order.  The run ends in exactly one of two ways:

- completed: every test ran (or the run was cut short by a scheduler
  cancellation or host interruption); the scheduler session is stopped
  and the result files are returned in test order.
- aborted: a configuration fault or untolerated test failure; the
  scheduler session is aborted and the error propagates.  No later test
  is started.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path, PurePosixPath

from loadtest_orchestrator.discovery.scanner import scan_test_files
from loadtest_orchestrator.errors import ConfigurationError, TestExecutionError
from loadtest_orchestrator.execution.arguments import EngineArguments
from loadtest_orchestrator.execution.exit_code import ExecutionOutcome, OutcomeKind
from loadtest_orchestrator.execution.remote import evaluate_remote_policy
from loadtest_orchestrator.execution.settings import RunSettings
from loadtest_orchestrator.execution.supervisor import ProcessSupervisor
from loadtest_orchestrator.scheduler.protocol import EventScheduler, scheduler_run_id

log = logging.getLogger(__name__)

RUN_ID_PROPERTY = "test.testRunId"


class SequentialExecutor:
    """Executes test definitions sequentially with a post-test pause."""

    def __init__(
        self,
        settings: RunSettings,
        scheduler: EventScheduler | None = None,
        supervisor: ProcessSupervisor | None = None,
    ) -> None:
        self.settings = settings
        self.scheduler = scheduler
        self.supervisor = supervisor or ProcessSupervisor(settings, scheduler)
        self.tests: list[str] = []
        self.results: list[Path] = []
        self.outcomes: list[ExecutionOutcome] = []
        self.interrupted = False
        self._pause_event = threading.Event()

    def discover(self) -> list[str]:
        """Scan the test files directory using the configured patterns."""
        return scan_test_files(
            self.settings.test_files_directory,
            self.settings.included,
            self.settings.excluded,
        )

    def execute(self) -> list[Path]:
        """Run all discovered tests.

        Returns:
            Result file paths, one per executed test, in test order.

        Raises:
            ConfigurationError: If a test could not be prepared or launched.
            TestExecutionError: If a test exited with an untolerated
                non-zero status.
        """
        self.tests = self.discover()
        if not self.tests:
            log.info("No test files found in %s", self.settings.test_files_directory)

        arguments = self._base_arguments()
        completed = False
        try:
            for index, test in enumerate(self.tests):
                outcome = self._run_test(index, arguments)
                self.outcomes.append(outcome)
                if outcome.is_fatal:
                    raise TestExecutionError(test, outcome.exit_code)
                self.results.append(outcome.result_file)

                if outcome.kind is OutcomeKind.INTERRUPTED_BY_HOST:
                    self.interrupted = True
                    self._log_skipped(index, "host interruption")
                    break
                if (
                    outcome.kind is OutcomeKind.CANCELLED_BY_SCHEDULER
                    and self.settings.abort_on_cancel
                ):
                    self._log_skipped(index, "scheduler cancellation")
                    break

                self._pause()
            completed = True
        finally:
            if self.scheduler is not None:
                if completed:
                    self.scheduler.stop_session()
                elif not self.scheduler.is_session_stopped():
                    log.info("Aborting event scheduler session")
                    self.scheduler.abort_session()

        return list(self.results)

    def interrupt_pause(self) -> None:
        """Cut the current post-test pause short."""
        self._pause_event.set()

    def _base_arguments(self) -> EngineArguments:
        arguments = self.settings.base_arguments
        if self.settings.remote.properties:
            arguments = arguments.with_global_properties(self.settings.remote.properties)

        run_id = scheduler_run_id(self.scheduler)
        if run_id and run_id != self.settings.run_id:
            override = f"-J{RUN_ID_PROPERTY}={run_id}"
            log.info(
                "Engine argument override of run id %r with %r",
                self.settings.run_id,
                override,
            )
            arguments = arguments.with_extra_argument(override)
        return arguments

    def _run_test(self, index: int, arguments: EngineArguments) -> ExecutionOutcome:
        test = self.tests[index]

        if self.settings.generate_reports:
            report_dir = (
                self.settings.report_directory / PurePosixPath(test).with_suffix("")
            ).resolve()
            log.info("Will generate HTML report in %s", report_dir)
            try:
                report_dir.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise ConfigurationError(
                    f"Unable to create report output folder: {report_dir}"
                ) from e
            arguments = arguments.with_reports_directory(report_dir)

        directives = evaluate_remote_policy(self.tests, index, self.settings.remote)
        if directives.start:
            arguments = arguments.with_remote_start(self.settings.remote.server_list)
        if directives.stop:
            arguments = arguments.with_remote_stop()

        return self.supervisor.run_test(test, arguments, start_session=index == 0)

    def _pause(self) -> None:
        seconds = self.settings.post_test_pause_seconds
        if seconds <= 0:
            return
        self._pause_event.clear()
        try:
            if self._pause_event.wait(seconds):
                log.info("Post-test pause cut short")
        except KeyboardInterrupt:
            log.info("Post-test pause interrupted, continuing with next test")

    def _log_skipped(self, index: int, reason: str) -> None:
        remaining = len(self.tests) - index - 1
        if remaining:
            log.info("Skipping %d remaining test(s) after %s", remaining, reason)
