"""
Storyframe Logging Configuration

Every record carries the id of the generation job it was emitted under
("-" outside a job), so interleaved API jobs can be told apart in one log.
Session log files always capture pipeline milestones (INFO) even when the
console is kept quiet.
"""

import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Iterator, Optional


class LogLevel(Enum):
    """Log level enumeration."""
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL


DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(job)s | %(name)s | %(message)s"
VERBOSE_FORMAT = "%(asctime)s | %(levelname)-8s | %(job)s | %(name)s:%(lineno)d | %(funcName)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

ROOT_LOGGER = "storyframe"
NO_JOB = "-"

# httpx logs one INFO line per request; only useful when debugging
NOISY_LOGGERS = ("httpx", "httpcore")

_current_job: ContextVar[str] = ContextVar("storyframe_job", default=NO_JOB)
_initialized = False


class JobContextFilter(logging.Filter):
    """Stamps records with the active job id."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.job = _current_job.get()
        return True


@contextmanager
def job_context(job_id: str) -> Iterator[None]:
    """Tag every record logged inside the block (and its awaits) with `job_id`."""
    token = _current_job.set(job_id)
    try:
        yield
    finally:
        _current_job.reset(token)


def _make_handler(handler: logging.Handler, level: int, verbose: bool) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(VERBOSE_FORMAT if verbose else DEFAULT_FORMAT, datefmt=DATE_FORMAT))
    handler.addFilter(JobContextFilter())
    return handler


def setup_logging(
    level: LogLevel = LogLevel.INFO,
    log_dir: Optional[Path] = None,
    verbose: bool = False,
    console_output: bool = True,
) -> Optional[Path]:
    """
    Configure the `storyframe` logger tree.

    Args:
        level: Console threshold
        log_dir: If set, a timestamped session log is created in it
        verbose: Include line numbers and function names
        console_output: Log to stderr

    Returns:
        Path of the session log, or None
    """
    global _initialized

    root_logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    session_log = None
    file_level = min(level.value, logging.INFO)
    root_logger.setLevel(file_level if log_dir else level.value)

    if console_output:
        root_logger.addHandler(_make_handler(logging.StreamHandler(sys.stderr), level.value, verbose))

    if log_dir:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        session_log = log_dir / f"storyframe_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"
        file_handler = logging.FileHandler(session_log, encoding="utf-8")
        root_logger.addHandler(_make_handler(file_handler, file_level, verbose))

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.NOTSET if level is LogLevel.DEBUG else logging.WARNING)

    _initialized = True
    return session_log


def get_logger(name: str) -> logging.Logger:
    """Logger under the `storyframe.` namespace; sets up defaults on first use."""
    if not _initialized:
        setup_logging()
    if name != ROOT_LOGGER and not name.startswith(f"{ROOT_LOGGER}."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)
