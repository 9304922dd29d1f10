"""Tests for the scheduler contract helpers."""

from __future__ import annotations

import logging

from loadtest_orchestrator.scheduler.protocol import (
    EventLogger,
    EventScheduler,
    scheduler_run_id,
)


class _Minimal:
    def start_session(self): ...
    def stop_session(self): ...
    def abort_session(self): ...
    def add_kill_switch(self, handler): ...
    def is_session_stopped(self): return False


class _WithRunId(_Minimal):
    def get_run_identifier(self):
        return "run-7"


class TestSchedulerRunId:
    def test_none_scheduler(self):
        assert scheduler_run_id(None) is None

    def test_scheduler_without_run_id(self):
        assert scheduler_run_id(_Minimal()) is None

    def test_scheduler_with_run_id(self):
        assert scheduler_run_id(_WithRunId()) == "run-7"

    def test_protocol_runtime_check(self):
        assert isinstance(_Minimal(), EventScheduler)
        assert not isinstance(object(), EventScheduler)


class TestEventLogger:
    """Tests for the logging adapter."""

    def test_levels(self, caplog):
        logger = logging.getLogger("test.event_logger")
        adapter = EventLogger(logger, debug_enabled=True)
        with caplog.at_level(logging.DEBUG, logger="test.event_logger"):
            adapter.info("i")
            adapter.warn("w")
            adapter.error("e")
            adapter.debug("d")
        assert [(r.levelno, r.getMessage()) for r in caplog.records] == [
            (logging.INFO, "i"),
            (logging.WARNING, "w"),
            (logging.ERROR, "e"),
            (logging.DEBUG, "d"),
        ]

    def test_debug_disabled(self, caplog):
        logger = logging.getLogger("test.event_logger")
        adapter = EventLogger(logger)
        with caplog.at_level(logging.DEBUG, logger="test.event_logger"):
            adapter.debug("hidden")
        assert not adapter.is_debug_enabled()
        assert caplog.records == []

    def test_error_with_exception(self, caplog):
        logger = logging.getLogger("test.event_logger")
        with caplog.at_level(logging.ERROR, logger="test.event_logger"):
            EventLogger(logger).error("boom", ValueError("bad"))
        assert caplog.records[0].exc_info[0] is ValueError
