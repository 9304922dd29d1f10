"""Test discovery: scan a directory for test definition files."""

from loadtest_orchestrator.discovery.scanner import (
    DEFAULT_INCLUDES,
    match_pattern,
    scan_test_files,
)

__all__ = [
    "DEFAULT_INCLUDES",
    "match_pattern",
    "scan_test_files",
]
