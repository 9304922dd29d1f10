"""Unit tests for the reporter module."""

from __future__ import annotations

import tempfile
from pathlib import Path

import yaml

from loadtest_orchestrator.execution.cancellation import SchedulerExceptionType
from loadtest_orchestrator.execution.exit_code import (
    ExecutionOutcome,
    OutcomeKind,
    classify_exit,
)
from loadtest_orchestrator.reporting.reporter import Reporter

NONE = SchedulerExceptionType.NONE


class TestReporter:
    """Tests for Reporter."""

    def test_empty_report(self):
        report = Reporter().generate_report()["report"]
        assert report["summary"]["executed"] == 0
        assert report["tests"] == []
        assert report["result_files"] == []

    def test_outcomes_summarised(self):
        reporter = Reporter(run_id="run-1")
        reporter.set_discovered(["a.jmx", "b.jmx", "c.jmx", "d.jmx"])
        reporter.add_outcomes([
            classify_exit("a.jmx", 0, NONE, Path("r/a.jtl")),
            classify_exit("b.jmx", 143, SchedulerExceptionType.KILL, Path("r/b.jtl")),
            classify_exit("c.jmx", 1, NONE, Path("r/c.jtl")),
        ])
        reporter.set_error("Test c.jmx failed with exit code: 1")
        report = reporter.generate_report()["report"]

        assert report["run_id"] == "run-1"
        assert report["error"].startswith("Test c.jmx")
        summary = report["summary"]
        assert summary["passed"] == 1
        assert summary["cancelled"] == 1
        assert summary["failed"] == 1
        assert summary["not_run"] == 1
        assert report["tests"][1]["status"] == "cancelled:kill"
        # Failed tests don't contribute result files.
        assert report["result_files"] == ["r/a.jtl", "r/b.jtl"]

    def test_interrupted_entry_has_no_exit_code(self):
        reporter = Reporter()
        reporter.add_outcomes([
            ExecutionOutcome(
                test="a.jmx",
                kind=OutcomeKind.INTERRUPTED_BY_HOST,
                result_file=Path("r/a.jtl"),
            )
        ])
        entry = reporter.generate_report()["report"]["tests"][0]
        assert entry["status"] == "interrupted"
        assert "exit_code" not in entry

    def test_write_report_yaml(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "out" / "summary.yaml"
            reporter = Reporter()
            reporter.add_outcomes([classify_exit("a.jmx", 0, NONE, Path("r/a.jtl"))])
            reporter.write_report(path)

            data = yaml.safe_load(path.read_text())
            assert data["report"]["tests"][0]["name"] == "a.jmx"
            assert data["report"]["result_files"] == ["r/a.jtl"]
