"""Run summary reporting."""

from loadtest_orchestrator.reporting.reporter import Reporter

__all__ = ["Reporter"]
