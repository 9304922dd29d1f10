"""Entry point for the load-test orchestrator.

Loads the run configuration, discovers test definitions and executes them
one at a time.  Exit codes: 0 success, 1 configuration fault or test
failure, 130 interrupted by the host.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from loadtest_orchestrator.config import RunConfig
from loadtest_orchestrator.errors import OrchestratorError
from loadtest_orchestrator.execution.executor import SequentialExecutor
from loadtest_orchestrator.reporting.reporter import Reporter

EXIT_INTERRUPTED = 130


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Load-test orchestrator - executes test definitions sequentially"
    )
    parser.add_argument(
        "--test-files-dir",
        type=Path,
        default=None,
        help="Directory containing test definition files",
    )
    parser.add_argument(
        "--config-file",
        type=Path,
        default=None,
        help="Path to the JSON run configuration file",
    )
    parser.add_argument(
        "--include",
        action="append",
        default=None,
        help="Include pattern (repeatable, default: **/*.jmx)",
    )
    parser.add_argument(
        "--exclude",
        action="append",
        default=None,
        help="Exclude pattern (repeatable)",
    )
    parser.add_argument(
        "--post-test-pause",
        type=str,
        default=None,
        help="Seconds to pause after each test",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Path to write the YAML run summary",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        default=False,
        help="Enable debug logging (includes suppressed engine output)",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = RunConfig(args.config_file)
    config.update(
        test_files_directory=str(args.test_files_dir) if args.test_files_dir else None,
        test_files_included=args.include,
        test_files_excluded=args.exclude,
        post_test_pause_seconds=args.post_test_pause,
    )
    settings = config.build_settings()

    print("P E R F O R M A N C E    T E S T S")
    print()
    directory = settings.test_files_directory
    if directory is None or not directory.is_dir():
        print(f"Test files directory {directory} does not exist...")
        print("Performance tests skipped!")
        return 0

    executor = SequentialExecutor(settings)
    reporter = Reporter(run_id=settings.run_id)
    exit_code = 0
    try:
        results = executor.execute()
    except OrchestratorError as e:
        print(f"Error: {e}", file=sys.stderr)
        reporter.set_error(str(e))
        exit_code = 1
    else:
        print(f"Executed {len(results)} test(s)")
        for path in results:
            print(f"  {path}")
        if executor.interrupted:
            print("Run interrupted", file=sys.stderr)
            exit_code = EXIT_INTERRUPTED

    reporter.set_discovered(executor.tests)
    reporter.add_outcomes(executor.outcomes)
    if args.output:
        reporter.write_report(args.output)
        print(f"Report written to: {args.output}")
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
