"""Immutable per-run settings shared by the supervisor and the executor."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from loadtest_orchestrator.discovery.scanner import DEFAULT_INCLUDES
from loadtest_orchestrator.execution.arguments import EngineArguments, ProcessSettings
from loadtest_orchestrator.execution.remote import RemoteConfiguration

log = logging.getLogger(__name__)


def parse_pause_seconds(value: Any) -> float:
    """Parse a post-test pause, clamping invalid or negative values to 0."""
    if value is None:
        return 0.0
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        log.warning(
            "Error parsing post_test_pause_seconds %r, will default to 0", value
        )
        return 0.0
    if not math.isfinite(seconds) or seconds < 0:
        log.warning(
            "Invalid post_test_pause_seconds %r, will default to 0", value
        )
        return 0.0
    return seconds


@dataclass(frozen=True)
class RunSettings:
    """Everything a run needs, resolved and validated."""

    test_files_directory: Path | None
    included: tuple[str, ...] = DEFAULT_INCLUDES
    excluded: tuple[str, ...] = ()
    working_directory: Path | None = None
    results_directory: Path = Path("results")
    results_format: str = "jtl"
    post_test_pause_seconds: float = 0.0
    ignore_jvm_killed: bool = False
    suppress_output: bool = False
    generate_reports: bool = False
    report_directory: Path = Path("reports")
    process: ProcessSettings = field(default_factory=ProcessSettings)
    base_arguments: EngineArguments = field(default_factory=EngineArguments)
    remote: RemoteConfiguration = field(default_factory=RemoteConfiguration)
    run_id: str | None = None
    abort_on_cancel: bool = False
    drain_timeout: float = 5.0
    termination_grace: float = 10.0
