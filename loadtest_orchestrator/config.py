"""Run configuration file management.

Reads the JSON run configuration that describes where test definitions
live, how the engine is launched, the remote server policy and the
post-test behaviour.  Missing keys fall back to ``DEFAULT_CONFIG``; a
missing or unreadable file yields the defaults.
"""

from __future__ import annotations

import copy
import json
import logging
import math
from pathlib import Path
from typing import Any

from loadtest_orchestrator.discovery.scanner import DEFAULT_INCLUDES
from loadtest_orchestrator.execution.arguments import (
    RESULTS_FORMATS,
    EngineArguments,
    ProcessSettings,
)
from loadtest_orchestrator.execution.remote import RemoteConfiguration
from loadtest_orchestrator.execution.settings import RunSettings, parse_pause_seconds

log = logging.getLogger(__name__)

# Default configuration values
DEFAULT_CONFIG: dict[str, Any] = {
    "test_files_directory": None,
    "test_files_included": list(DEFAULT_INCLUDES),
    "test_files_excluded": [],
    "working_directory": None,
    "results_directory": "target/jmeter/results",
    "results_format": "jtl",
    "report_directory": "target/jmeter/reports",
    "generate_reports": False,
    "post_test_pause_seconds": 0,
    "ignore_jvm_killed": False,
    "suppress_output": False,
    "run_id": None,
    "abort_on_cancel": False,
    "drain_timeout": 5.0,
    "engine": {
        "executable": "java",
        "xms": "512M",
        "xmx": "512M",
        "jvm_arguments": ["-Djava.awt.headless=true"],
        "runtime_jar": None,
        "home": None,
        "arguments": ["-n"],
    },
    "remote": {
        "servers": [],
        "start_servers_before_tests": False,
        "stop_servers_after_tests": False,
        "start_and_stop_servers_for_each_test": False,
        "properties": {},
    },
}


def _merge(defaults: dict[str, Any], data: dict[str, Any]) -> dict[str, Any]:
    merged = copy.deepcopy(defaults)
    for key, value in data.items():
        if isinstance(merged.get(key), dict) and isinstance(value, dict):
            merged[key] = {**merged[key], **value}
        else:
            merged[key] = value
    return merged


def _optional_path(value: Any) -> Path | None:
    return Path(value) if value else None


class RunConfig:
    """Manages the JSON run configuration file."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path
        self._data: dict[str, Any] = copy.deepcopy(DEFAULT_CONFIG)
        if path is not None and path.exists():
            self._load()

    def _load(self) -> None:
        """Load config from the file."""
        assert self.path is not None
        try:
            data = json.loads(self.path.read_text())
        except (json.JSONDecodeError, OSError) as e:
            log.warning("Ignoring unreadable config %s: %s", self.path, e)
            return
        if isinstance(data, dict):
            self._data = _merge(DEFAULT_CONFIG, data)

    @property
    def config(self) -> dict[str, Any]:
        """Get the full configuration dict."""
        return copy.deepcopy(self._data)

    def update(self, **overrides: Any) -> None:
        """Apply overrides, skipping those that are None."""
        for key, value in overrides.items():
            if value is not None:
                self._data[key] = value

    @property
    def test_files_directory(self) -> Path | None:
        return _optional_path(self._data.get("test_files_directory"))

    @property
    def test_files_included(self) -> tuple[str, ...]:
        """Include patterns; an empty list means the default."""
        values = self._data.get("test_files_included") or DEFAULT_INCLUDES
        return tuple(values)

    @property
    def test_files_excluded(self) -> tuple[str, ...]:
        return tuple(self._data.get("test_files_excluded") or ())

    @property
    def post_test_pause_seconds(self) -> float:
        """Pause after each test; invalid values are clamped to 0."""
        return parse_pause_seconds(self._data.get("post_test_pause_seconds"))

    @property
    def results_format(self) -> str:
        fmt = str(self._data.get("results_format", "jtl")).lower()
        if fmt not in RESULTS_FORMATS:
            log.warning("Unknown results_format %r, using jtl", fmt)
            return "jtl"
        return fmt

    @property
    def drain_timeout(self) -> float:
        default = DEFAULT_CONFIG["drain_timeout"]
        value = self._data.get("drain_timeout", default)
        try:
            seconds = float(value)
        except (TypeError, ValueError):
            log.warning("Error parsing drain_timeout %r, using %s", value, default)
            return default
        if not math.isfinite(seconds) or seconds < 0:
            log.warning("Invalid drain_timeout %r, using %s", value, default)
            return default
        return seconds

    @property
    def process_settings(self) -> ProcessSettings:
        engine = self._data.get("engine") or {}
        return ProcessSettings(
            executable=engine.get("executable") or "java",
            xms=engine.get("xms"),
            xmx=engine.get("xmx"),
            jvm_arguments=tuple(engine.get("jvm_arguments") or ()),
            runtime_jar=engine.get("runtime_jar"),
        )

    @property
    def engine_arguments(self) -> EngineArguments:
        engine = self._data.get("engine") or {}
        return EngineArguments(
            engine_home=engine.get("home"),
            base_arguments=tuple(engine.get("arguments") or ()),
        )

    @property
    def remote_configuration(self) -> RemoteConfiguration:
        remote = self._data.get("remote") or {}
        return RemoteConfiguration(
            servers=tuple(remote.get("servers") or ()),
            start_servers_before_tests=bool(remote.get("start_servers_before_tests")),
            stop_servers_after_tests=bool(remote.get("stop_servers_after_tests")),
            start_and_stop_servers_for_each_test=bool(
                remote.get("start_and_stop_servers_for_each_test")
            ),
            properties={
                str(k): str(v) for k, v in (remote.get("properties") or {}).items()
            },
        )

    def build_settings(self) -> RunSettings:
        """Resolve the configuration into immutable run settings."""
        data = self._data
        return RunSettings(
            test_files_directory=self.test_files_directory,
            included=self.test_files_included,
            excluded=self.test_files_excluded,
            working_directory=_optional_path(data.get("working_directory")),
            results_directory=Path(
                data.get("results_directory") or DEFAULT_CONFIG["results_directory"]
            ),
            results_format=self.results_format,
            post_test_pause_seconds=self.post_test_pause_seconds,
            ignore_jvm_killed=bool(data.get("ignore_jvm_killed")),
            suppress_output=bool(data.get("suppress_output")),
            generate_reports=bool(data.get("generate_reports")),
            report_directory=Path(
                data.get("report_directory") or DEFAULT_CONFIG["report_directory"]
            ),
            process=self.process_settings,
            base_arguments=self.engine_arguments,
            remote=self.remote_configuration,
            run_id=data.get("run_id"),
            abort_on_cancel=bool(data.get("abort_on_cancel")),
            drain_timeout=self.drain_timeout,
        )
