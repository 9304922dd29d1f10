"""Test execution engine: argument assembly, supervision and sequencing."""

from loadtest_orchestrator.execution.arguments import EngineArguments, ProcessSettings
from loadtest_orchestrator.execution.cancellation import (
    CancellationState,
    KillSwitch,
    SchedulerExceptionType,
)
from loadtest_orchestrator.execution.executor import SequentialExecutor
from loadtest_orchestrator.execution.exit_code import ExecutionOutcome, OutcomeKind
from loadtest_orchestrator.execution.remote import (
    RemoteConfiguration,
    RemoteDirectives,
    evaluate_remote_policy,
)
from loadtest_orchestrator.execution.settings import RunSettings
from loadtest_orchestrator.execution.supervisor import ProcessSupervisor

__all__ = [
    "CancellationState",
    "EngineArguments",
    "ExecutionOutcome",
    "KillSwitch",
    "OutcomeKind",
    "ProcessSettings",
    "ProcessSupervisor",
    "RemoteConfiguration",
    "RemoteDirectives",
    "RunSettings",
    "SchedulerExceptionType",
    "SequentialExecutor",
    "evaluate_remote_policy",
]
