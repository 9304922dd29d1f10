"""Command-line assembly for the load-test engine process.

``ProcessSettings`` describes how to launch the engine runtime (a JVM with
the engine jar by default, or any executable).  ``EngineArguments`` is the
immutable base argument template; per-test values are layered on with
``dataclasses.replace`` so one test never leaks directives into the next.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Mapping

RESULTS_FORMATS = frozenset({"jtl", "csv"})


@dataclass(frozen=True)
class ProcessSettings:
    """How to start the engine runtime."""

    executable: str = "java"
    xms: str | None = None
    xmx: str | None = None
    jvm_arguments: tuple[str, ...] = ()
    runtime_jar: str | None = None

    def command_prefix(self) -> list[str]:
        """Runtime part of the command line, before engine arguments."""
        prefix = [self.executable]
        if self.xms:
            prefix.append(f"-Xms{self.xms}")
        if self.xmx:
            prefix.append(f"-Xmx{self.xmx}")
        prefix.extend(self.jvm_arguments)
        if self.runtime_jar:
            prefix.extend(["-jar", self.runtime_jar])
        return prefix


def results_file_for(test: str, results_directory: Path, results_format: str) -> Path:
    """Deterministic results file path for *test*.

    The test's relative path, minus its extension, is kept below
    *results_directory* so same-named tests in different folders don't
    collide.
    """
    if results_format not in RESULTS_FORMATS:
        raise ValueError(f"Unknown results format: {results_format}")
    stem = PurePosixPath(test).with_suffix("")
    return results_directory.joinpath(*stem.parts).with_suffix(f".{results_format}")


@dataclass(frozen=True)
class EngineArguments:
    """Engine argument template, specialised once per test."""

    engine_home: str | None = None
    base_arguments: tuple[str, ...] = ("-n",)
    test_file: Path | None = None
    results_file: Path | None = None
    reports_directory: Path | None = None
    remote_start: bool = False
    remote_servers: str = ""
    remote_stop: bool = False
    extra_arguments: tuple[str, ...] = ()
    global_properties: tuple[tuple[str, str], ...] = ()

    def for_test(self, test_file: Path, results_file: Path) -> EngineArguments:
        return dataclasses.replace(
            self, test_file=test_file, results_file=results_file
        )

    def with_reports_directory(self, directory: Path) -> EngineArguments:
        return dataclasses.replace(self, reports_directory=directory)

    def with_remote_start(self, servers: str) -> EngineArguments:
        return dataclasses.replace(self, remote_start=True, remote_servers=servers)

    def with_remote_stop(self) -> EngineArguments:
        return dataclasses.replace(self, remote_stop=True)

    def with_extra_argument(self, argument: str) -> EngineArguments:
        return dataclasses.replace(
            self, extra_arguments=self.extra_arguments + (argument,)
        )

    def with_global_properties(self, properties: Mapping[str, str]) -> EngineArguments:
        merged = dict(self.global_properties)
        merged.update(properties)
        return dataclasses.replace(
            self, global_properties=tuple(sorted(merged.items()))
        )

    def build(self) -> list[str]:
        """Build the engine argument vector.

        Raises:
            ValueError: If no test file or results file has been set.
        """
        if self.test_file is None or self.results_file is None:
            raise ValueError("Test file and results file must be set")

        args = list(self.base_arguments)
        args.extend(["-t", str(self.test_file), "-l", str(self.results_file)])
        if self.engine_home:
            args.extend(["-d", self.engine_home])
        if self.reports_directory is not None:
            args.extend(["-e", "-o", str(self.reports_directory)])
        if self.remote_start:
            if self.remote_servers:
                args.extend(["-R", self.remote_servers])
            else:
                args.append("-r")
        if self.remote_stop:
            args.append("-X")
        args.extend(self.extra_arguments)
        args.extend(f"-G{key}={value}" for key, value in self.global_properties)
        return args
