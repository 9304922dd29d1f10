"""Run one test definition as an engine subprocess.

For each test the supervisor:

1. clears any stale result file (failure to delete is a configuration
   fault),
2. launches the engine with the per-test command line,
3. hands a kill-switch to the scheduler and installs a shutdown hook
   that runs at interpreter exit or when the host receives SIGTERM,
4. drains stdout and stderr into the log on two daemon threads,
5. waits for the process and classifies its exit.

Everything acquired in steps 3 and 4 is released in a ``finally`` block:
the kill-switch is disarmed before the exit is classified, the hook is
removed, a still-running process is terminated, and the drain threads
are joined with a bounded timeout so log output is not truncated.
"""

from __future__ import annotations

import atexit
import contextlib
import logging
import signal
import subprocess
import threading
from pathlib import Path
from typing import IO, Iterator

from loadtest_orchestrator.errors import ConfigurationError
from loadtest_orchestrator.execution.arguments import EngineArguments, results_file_for
from loadtest_orchestrator.execution.cancellation import CancellationState, KillSwitch
from loadtest_orchestrator.execution.exit_code import (
    ExecutionOutcome,
    OutcomeKind,
    classify_exit,
    normalize_exit_status,
)
from loadtest_orchestrator.execution.settings import RunSettings
from loadtest_orchestrator.scheduler.protocol import EventScheduler

log = logging.getLogger(__name__)
engine_log = logging.getLogger("loadtest_orchestrator.engine")


class ShutdownHook:
    """Host shutdown hook for one running process.

    Safe to call more than once and from several threads; a call that
    finds another call in progress returns immediately instead of waiting.
    """

    def __init__(
        self,
        process: subprocess.Popen,
        scheduler: EventScheduler | None = None,
    ) -> None:
        self.process = process
        self.scheduler = scheduler
        self._lock = threading.Lock()
        self._fired = False

    def __call__(self) -> None:
        if not self._lock.acquire(blocking=False):
            return
        try:
            if self._fired:
                return
            self._fired = True
            if self.process.poll() is not None:
                return
            log.info("Shutdown detected, destroying engine process...")
            if self.scheduler is not None and not self.scheduler.is_session_stopped():
                self.scheduler.abort_session()
            self.process.terminate()
        finally:
            self._lock.release()


def _sigterm_handler(hook: ShutdownHook):
    """SIGTERM handler that runs *hook* and unwinds the host."""

    def handler(signum, frame):
        log.info("Received signal %d", signum)
        hook()
        raise SystemExit(128 + signum)

    return handler


def _drain(stream: IO[str], level: int, name: str) -> None:
    """Copy *stream* to the engine logger until end-of-stream."""
    try:
        with stream:
            for line in stream:
                engine_log.log(level, line.rstrip("\r\n"))
    except (OSError, ValueError) as e:
        # Stream closed underneath us when the process was torn down.
        log.debug("Stopped draining %s: %s", name, e)


class ProcessSupervisor:
    """Launches and supervises one engine process at a time."""

    def __init__(
        self,
        settings: RunSettings,
        scheduler: EventScheduler | None = None,
    ) -> None:
        self.settings = settings
        self.scheduler = scheduler

    def result_file(self, test: str) -> Path:
        return results_file_for(
            test, self.settings.results_directory, self.settings.results_format
        )

    def run_test(
        self,
        test: str,
        arguments: EngineArguments,
        start_session: bool = False,
    ) -> ExecutionOutcome:
        """Run *test* to completion.

        Args:
            test: Test path relative to the test files directory.
            arguments: Engine arguments with per-test directives applied.
            start_session: Start the scheduler session once the process
                and its kill-switch are in place.

        Returns:
            ExecutionOutcome for the test.

        Raises:
            ConfigurationError: If the result file cannot be prepared or
                the engine cannot be launched.
        """
        result_file = self.result_file(test)
        self._prepare_result_file(result_file)

        test_file = (self.settings.test_files_directory or Path(".")) / test
        argv = self.settings.process.command_prefix() + arguments.for_test(
            test_file, result_file
        ).build()

        log.info("Executing test: %s", test)
        log.debug("Command line: %s", " ".join(argv))

        state = CancellationState()
        try:
            process = subprocess.Popen(
                argv,
                cwd=self.settings.working_directory,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                errors="replace",
            )
        except OSError as e:
            raise ConfigurationError(f"Unable to launch test {test}: {e}") from e

        with self._supervised(process, state, start_session):
            try:
                returncode = process.wait()
            except KeyboardInterrupt:
                log.info("System exit detected! Stopping test %s...", test)
                return ExecutionOutcome(
                    test=test,
                    kind=OutcomeKind.INTERRUPTED_BY_HOST,
                    result_file=result_file,
                )

        outcome = classify_exit(
            test,
            normalize_exit_status(returncode),
            state.reason,
            result_file,
            ignore_jvm_killed=self.settings.ignore_jvm_killed,
        )
        self._log_outcome(outcome)
        return outcome

    def _prepare_result_file(self, result_file: Path) -> None:
        try:
            if result_file.exists():
                log.info(
                    "%s already exists, deleting file in preparation for new test run...",
                    result_file,
                )
                result_file.unlink()
            result_file.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConfigurationError(
                f"Failed to prepare results file {result_file}: {e}"
            ) from e

    @contextlib.contextmanager
    def _supervised(
        self,
        process: subprocess.Popen,
        state: CancellationState,
        start_session: bool,
    ) -> Iterator[None]:
        hook = ShutdownHook(process, self.scheduler)
        drains: list[threading.Thread] = []
        sigterm_installed = False
        previous_sigterm = None
        try:
            atexit.register(hook)
            # Signal handlers can only be installed from the main thread.
            if threading.current_thread() is threading.main_thread():
                previous_sigterm = signal.signal(signal.SIGTERM, _sigterm_handler(hook))
                sigterm_installed = True
            if self.scheduler is not None:
                log.info("Adding scheduler exception handler to event scheduler")
                self.scheduler.add_kill_switch(KillSwitch(process, state))
                if start_session:
                    self.scheduler.start_session()

            stdout_level = logging.DEBUG if self.settings.suppress_output else logging.INFO
            for stream, level, name in (
                (process.stdout, stdout_level, "stdout"),
                (process.stderr, logging.ERROR, "stderr"),
            ):
                thread = threading.Thread(
                    target=_drain,
                    args=(stream, level, name),
                    name=f"engine-{name}-{process.pid}",
                    daemon=True,
                )
                thread.start()
                drains.append(thread)
            yield
        finally:
            state.close()
            if sigterm_installed:
                signal.signal(
                    signal.SIGTERM,
                    signal.SIG_DFL if previous_sigterm is None else previous_sigterm,
                )
            atexit.unregister(hook)
            self._terminate(process)
            for thread in drains:
                thread.join(self.settings.drain_timeout)
                if thread.is_alive():
                    log.warning("%s still draining after process exit", thread.name)

    def _terminate(self, process: subprocess.Popen) -> None:
        """Terminate *process* if it is still running, killing it if it lingers."""
        if process.poll() is not None:
            return
        log.info("Terminating engine process %d", process.pid)
        process.terminate()
        try:
            process.wait(timeout=self.settings.termination_grace)
        except subprocess.TimeoutExpired:
            log.warning("Engine process %d ignored SIGTERM, killing", process.pid)
            process.kill()
            process.wait()

    def _log_outcome(self, outcome: ExecutionOutcome) -> None:
        if outcome.kind is OutcomeKind.CANCELLED_BY_SCHEDULER:
            log.info(
                "Event scheduler triggered exception: %s, will continue with "
                "regular test completion steps.",
                outcome.cancellation.name,
            )
        elif outcome.tolerated:
            log.warning("JVM has been force killed!")
            log.warning(
                "Build failure not triggered due to config settings, "
                "however you may want to investigate this"
            )
        elif outcome.is_fatal:
            log.error("Test %s exited with code %s", outcome.test, outcome.exit_code)
            return
        log.info("Completed test: %s", outcome.test)
