"""
Tests for logging setup and in-memory metrics.
"""

import logging
import sys
from pathlib import Path

import pytest

from blockscan.config import LoggingSettings
from blockscan.utils.logging import (
    get_logger,
    get_logger_with_context,
    setup_logging,
)
from blockscan.utils.metrics import DurationStats, Metrics


class TestLogging:
    """Tests for logging configuration."""

    def test_module_loggers_are_children(self):
        assert get_logger("blockscan.pipeline.worker").name == "blockscan.pipeline.worker"
        assert get_logger("tests.helper").name == "blockscan.tests.helper"
        assert get_logger().name == "blockscan"

    def test_setup_logging_once(self):
        first = setup_logging(LoggingSettings(level="WARNING"))
        handler_count = len(first.handlers)

        second = setup_logging(LoggingSettings(level="DEBUG"))

        assert second is first
        assert len(second.handlers) == handler_count
        assert first.level == logging.WARNING

    def test_console_logs_to_stderr(self):
        logger = setup_logging(LoggingSettings(log_to_console=True))

        streams = [handler.stream for handler in logger.handlers]
        assert streams == [sys.stderr]

    def test_file_handler(self, temp_dir: Path):
        log_path = temp_dir / "logs" / "blockscan.log"
        setup_logging(LoggingSettings(file_path=log_path, log_to_console=False))

        get_logger(__name__).info("Worker started")
        for handler in logging.getLogger("blockscan").handlers:
            handler.flush()

        assert "Worker started" in log_path.read_text()

    def test_context_logger(self, caplog):
        logger = get_logger_with_context(__name__, scan_id="abc123")
        logging.getLogger("blockscan").propagate = True

        with caplog.at_level(logging.INFO, logger="blockscan"):
            logger.info("Job popped")

        assert "Job popped [scan_id=abc123]" in caplog.text


class TestMetrics:
    """Tests for the metrics collector."""

    def test_counters(self):
        metrics = Metrics.get()

        assert metrics.increment("jobs_processed") == 1
        assert metrics.increment("jobs_processed", 2) == 3
        assert metrics.get_counter("jobs_processed") == 3
        assert metrics.get_counter("missing") == 0

    def test_singleton_and_reset(self):
        metrics = Metrics.get()
        metrics.increment("jobs_blocked")

        Metrics.reset()

        assert Metrics.get() is metrics
        assert metrics.get_counter("jobs_blocked") == 0

    def test_timer(self):
        metrics = Metrics.get()

        with metrics.timer("job_duration_ms"):
            pass

        stats = metrics.get_timing("job_duration_ms")
        assert stats.count == 1
        assert stats.total_ms >= 0

    def test_timer_records_on_error(self):
        metrics = Metrics.get()

        with pytest.raises(RuntimeError):
            with metrics.timer("job_duration_ms"):
                raise RuntimeError("scan failed")

        assert metrics.get_timing("job_duration_ms").count == 1

    def test_summary(self):
        metrics = Metrics.get()
        assert metrics.summary() == "No jobs recorded"

        metrics.increment("scans_enqueued")
        metrics.increment("jobs_processed", 2)
        with metrics.timer("job_duration_ms"):
            pass

        lines = metrics.summary().splitlines()

        assert lines[:2] == ["jobs_processed: 2", "scans_enqueued: 1"]
        assert lines[2].startswith("job_duration_ms: 1 jobs, avg ")

    def test_duration_stats(self):
        stats = DurationStats()
        assert stats.avg_ms == 0.0

        stats.add(10)
        stats.add(30)

        assert stats.count == 2
        assert stats.avg_ms == 20
        assert stats.max_ms == 30
