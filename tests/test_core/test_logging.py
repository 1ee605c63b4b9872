"""
Tests for Logging Configuration

Tests for storyframe/core/logging_config.py
"""

import logging

import pytest

from storyframe.core.logging_config import (
    LogLevel,
    get_logger,
    job_context,
    setup_logging,
)


@pytest.fixture(autouse=True)
def reset_logging():
    """Close any session log handlers a test opened."""
    yield
    setup_logging()


def read_log(path):
    return path.read_text(encoding="utf-8")


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_no_log_dir_no_file(self):
        assert setup_logging(LogLevel.WARNING) is None
        assert logging.getLogger("storyframe").level == logging.WARNING

    def test_session_log_created(self, temp_dir):
        session_log = setup_logging(LogLevel.INFO, log_dir=temp_dir / "logs")

        assert session_log.parent == temp_dir / "logs"
        assert session_log.name.startswith("storyframe_")
        assert session_log.exists()

    def test_session_log_keeps_info_with_quiet_console(self, temp_dir):
        session_log = setup_logging(LogLevel.WARNING, log_dir=temp_dir)

        get_logger("pipeline").info("Structure ready")

        root = logging.getLogger("storyframe")
        console = [h for h in root.handlers if not isinstance(h, logging.FileHandler)]
        assert console[0].level == logging.WARNING
        assert "Structure ready" in read_log(session_log)

    def test_rerun_closes_previous_file(self, temp_dir):
        setup_logging(LogLevel.INFO, log_dir=temp_dir)
        old_handlers = list(logging.getLogger("storyframe").handlers)

        setup_logging(LogLevel.INFO)

        file_handlers = [h for h in old_handlers if isinstance(h, logging.FileHandler)]
        assert file_handlers and all(h.stream is None for h in file_handlers)
        assert not any(isinstance(h, logging.FileHandler) for h in logging.getLogger("storyframe").handlers)

    def test_http_client_logs_muted(self):
        setup_logging(LogLevel.INFO)
        assert logging.getLogger("httpx").level == logging.WARNING

        setup_logging(LogLevel.DEBUG)
        assert logging.getLogger("httpx").level == logging.NOTSET


class TestJobContext:
    """Tests for job id tagging."""

    def test_records_tagged_with_job(self, temp_dir):
        session_log = setup_logging(LogLevel.INFO, log_dir=temp_dir)
        logger = get_logger("jobs")

        with job_context("abc123"):
            logger.info("inside")
        logger.info("outside")

        lines = read_log(session_log).splitlines()
        assert "| abc123 |" in next(line for line in lines if line.endswith("inside"))
        assert "| - |" in next(line for line in lines if line.endswith("outside"))

    def test_context_restored_after_error(self, temp_dir):
        session_log = setup_logging(LogLevel.INFO, log_dir=temp_dir)

        with pytest.raises(RuntimeError):
            with job_context("boom"):
                raise RuntimeError("failed")
        get_logger("jobs").info("after")

        assert "| - |" in read_log(session_log).splitlines()[-1]

    def test_verbose_format_includes_location(self, temp_dir):
        session_log = setup_logging(LogLevel.INFO, log_dir=temp_dir, verbose=True)

        get_logger("jobs").info("located")

        assert "test_verbose_format_includes_location" in read_log(session_log)


class TestGetLogger:
    """Tests for get_logger naming."""

    def test_prefixes_namespace(self):
        assert get_logger("api").name == "storyframe.api"

    def test_keeps_existing_namespace(self):
        assert get_logger("storyframe.audio").name == "storyframe.audio"
        assert get_logger("storyframe").name == "storyframe"
