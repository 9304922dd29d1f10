"""Remote server start/stop policy.

Decides, per test, whether the engine invocation should start the remote
load generators and/or stop them afterwards:

- start: start-and-stop-each, or start-before-tests on the first test
- stop: start-and-stop-each, or stop-after-tests on the last test

The two directives are evaluated independently, so a single-test run with
both start-before and stop-after set gets both.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence


@dataclass(frozen=True)
class RemoteConfiguration:
    """Remote load-generator servers and the policy for driving them."""

    servers: tuple[str, ...] = ()
    start_servers_before_tests: bool = False
    stop_servers_after_tests: bool = False
    start_and_stop_servers_for_each_test: bool = False
    properties: dict[str, str] = field(default_factory=dict)

    @property
    def server_list(self) -> str:
        """Comma separated server list as the engine expects it."""
        return ",".join(self.servers)


@dataclass(frozen=True)
class RemoteDirectives:
    """Remote directives for a single test invocation."""

    start: bool = False
    stop: bool = False


def evaluate_remote_policy(
    tests: Sequence[str],
    index: int,
    remote: RemoteConfiguration | None,
) -> RemoteDirectives:
    """Compute the remote directives for ``tests[index]``.

    Args:
        tests: The discovered, ordered test list.
        index: Position of the current test in *tests*.
        remote: Remote configuration, or ``None`` for local-only runs.

    Returns:
        RemoteDirectives for this one invocation.

    Raises:
        IndexError: If *index* is outside *tests*.
    """
    if not 0 <= index < len(tests):
        raise IndexError(f"Test index {index} out of range for {len(tests)} tests")
    if remote is None:
        return RemoteDirectives()

    every = remote.start_and_stop_servers_for_each_test
    start = every or (remote.start_servers_before_tests and index == 0)
    stop = every or (remote.stop_servers_after_tests and index == len(tests) - 1)
    return RemoteDirectives(start=start, stop=stop)
