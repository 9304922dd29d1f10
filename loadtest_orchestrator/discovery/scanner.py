"""Discover load-test definition files below a root directory.

Patterns use Ant-style globs, matched against POSIX relative paths:

- ``*`` and ``?`` match within a single path segment
- ``**`` matches zero or more whole segments
- a pattern ending in ``/`` is treated as if ``**`` followed it

A file is selected when it matches at least one include pattern and no
exclude pattern.  Results are sorted so repeated scans of an unchanged
tree return identical lists.
"""

from __future__ import annotations

import fnmatch
import logging
import os
from pathlib import Path
from typing import Sequence

log = logging.getLogger(__name__)

DEFAULT_INCLUDES: tuple[str, ...] = ("**/*.jmx",)


def _split(path: str) -> list[str]:
    """Split a pattern or path into non-empty POSIX segments."""
    return [part for part in path.replace("\\", "/").split("/") if part]


def _normalize_pattern(pattern: str) -> list[str]:
    segments = _split(pattern)
    if pattern.replace("\\", "/").endswith("/"):
        segments.append("**")
    return segments


def _match_segments(pattern: list[str], path: list[str]) -> bool:
    """Match pattern segments against path segments.

    Recursive only at ``**`` segments; consecutive ``**`` collapse.
    """
    p = 0
    s = 0
    while p < len(pattern):
        seg = pattern[p]
        if seg == "**":
            while p < len(pattern) and pattern[p] == "**":
                p += 1
            if p == len(pattern):
                return True
            rest = pattern[p:]
            for start in range(s, len(path)):
                if _match_segments(rest, path[start:]):
                    return True
            return False
        if s >= len(path) or not fnmatch.fnmatchcase(path[s], seg):
            return False
        p += 1
        s += 1
    return s == len(path)


def match_pattern(pattern: str, path: str) -> bool:
    """Return True if the relative *path* matches the Ant-style *pattern*."""
    return _match_segments(_normalize_pattern(pattern), _split(path))


def scan_test_files(
    root: str | os.PathLike[str] | None,
    included: Sequence[str] | None = None,
    excluded: Sequence[str] | None = None,
) -> list[str]:
    """Find test definition files below *root*.

    Args:
        root: Directory to scan.  ``None`` or a missing directory yields an
            empty list; callers decide whether that is an error.
        included: Include patterns.  ``None`` or empty means
            ``DEFAULT_INCLUDES``.
        excluded: Exclude patterns (default: none).

    Returns:
        Sorted list of matching paths relative to *root*, using ``/`` as
        separator.
    """
    if root is None:
        return []
    base = Path(root)
    if not base.is_dir():
        log.debug("Test files directory %s does not exist", base)
        return []

    includes = [_normalize_pattern(p) for p in (included or DEFAULT_INCLUDES)]
    excludes = [_normalize_pattern(p) for p in (excluded or ())]

    found: list[str] = []
    for dirpath, dirnames, filenames in os.walk(base):
        dirnames.sort()
        rel_dir = Path(dirpath).relative_to(base)
        for filename in filenames:
            rel = (rel_dir / filename).as_posix()
            segments = _split(rel)
            if not any(_match_segments(p, segments) for p in includes):
                continue
            if any(_match_segments(p, segments) for p in excludes):
                continue
            found.append(rel)

    found.sort()
    log.debug("Discovered %d test file(s) in %s", len(found), base)
    return found
