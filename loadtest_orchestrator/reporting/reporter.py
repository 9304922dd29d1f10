"""YAML summary of a test run.

Records each executed test's outcome and the locations of its result
file, so later pipeline stages (report generation, result checks) can
find the artifacts without rescanning.
"""

from __future__ import annotations

import datetime
from pathlib import Path
from typing import Any

import yaml

from loadtest_orchestrator.execution.exit_code import ExecutionOutcome


class Reporter:
    """Collects execution outcomes and writes a YAML summary."""

    def __init__(self, run_id: str | None = None) -> None:
        self.run_id = run_id
        self.outcomes: list[ExecutionOutcome] = []
        self.discovered: list[str] = []
        self.error: str | None = None

    def add_outcomes(self, outcomes: list[ExecutionOutcome]) -> None:
        self.outcomes.extend(outcomes)

    def set_discovered(self, tests: list[str]) -> None:
        self.discovered = list(tests)

    def set_error(self, message: str) -> None:
        self.error = message

    def generate_report(self) -> dict[str, Any]:
        now = datetime.datetime.now(tz=datetime.timezone.utc).isoformat()
        report: dict[str, Any] = {
            "generated_at": now,
            "summary": self._compute_summary(),
            "tests": [self._format_outcome(o) for o in self.outcomes],
            "result_files": [
                str(o.result_file) for o in self.outcomes if not o.is_fatal
            ],
        }
        if self.run_id:
            report["run_id"] = self.run_id
        if self.error:
            report["error"] = self.error
        return {"report": report}

    def write_report(self, path: Path) -> None:
        """Write the report as a YAML file."""
        report = self.generate_report()
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.safe_dump(report, f, sort_keys=False)

    def _compute_summary(self) -> dict[str, Any]:
        statuses = [o.status for o in self.outcomes]
        summary: dict[str, Any] = {
            "discovered": len(self.discovered),
            "executed": len(self.outcomes),
            "passed": statuses.count("passed"),
            "tolerated": statuses.count("tolerated"),
            "failed": statuses.count("failed"),
            "cancelled": sum(1 for s in statuses if s.startswith("cancelled")),
            "interrupted": statuses.count("interrupted"),
        }
        not_run = len(self.discovered) - len(self.outcomes)
        if not_run > 0:
            summary["not_run"] = not_run
        return summary

    def _format_outcome(self, outcome: ExecutionOutcome) -> dict[str, Any]:
        entry: dict[str, Any] = {
            "name": outcome.test,
            "status": outcome.status,
            "result_file": str(outcome.result_file),
        }
        if outcome.exit_code is not None:
            entry["exit_code"] = outcome.exit_code
        return entry
