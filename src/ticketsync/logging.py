"""Logging configuration for ticketsync.

Every component logs through a child of the ``ticketsync`` logger, so a single
call to :func:`setup_logging` routes the whole run to one rotating log file
and, optionally, to the console.
"""

from __future__ import annotations

import logging
import os
import re
from logging.handlers import RotatingFileHandler
from pathlib import Path

DEFAULT_LOG_DIR = "logs"
DEFAULT_LOG_FILE = "ticketsync.log"
DEFAULT_MAX_BYTES = 10 * 1024 * 1024  # 10MB
DEFAULT_BACKUP_COUNT = 5
DEFAULT_LOG_LEVEL = "INFO"

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

ROOT_LOGGER = "ticketsync"

_SENSITIVE_PATTERNS = [
    (re.compile(r"ghp_[a-zA-Z0-9]{36}"), "[GITHUB_TOKEN]"),
    (re.compile(r"gho_[a-zA-Z0-9]{36}"), "[GITHUB_TOKEN]"),
    (re.compile(r"github_pat_[a-zA-Z0-9_]{82}"), "[GITHUB_TOKEN]"),
    (re.compile(r"Bearer [a-zA-Z0-9._-]+"), "Bearer [REDACTED]"),
    (re.compile(r"Basic [a-zA-Z0-9+/=]+"), "Basic [REDACTED]"),
    (re.compile(r"JSESSIONID=[a-zA-Z0-9._-]+"), "JSESSIONID=[REDACTED]"),
    (re.compile(r'"password"\s*:\s*"[^"]*"'), '"password": "[REDACTED]"'),
]


def setup_logging(
    log_dir: str | Path | None = None,
    log_file: str = DEFAULT_LOG_FILE,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
    level: str | None = None,
    console: bool = True,
) -> logging.Logger:
    """Configure the ticketsync logger tree.

    Args:
        log_dir: Directory for log files. Defaults to ``TICKETSYNC_LOG_DIR``
                 or ``logs`` in the current directory.
        log_file: Log file name.
        max_bytes: Size at which the log file is rotated.
        backup_count: Number of rotated files to keep.
        level: Log level name. Defaults to ``TICKETSYNC_LOG_LEVEL`` or INFO.
        console: Whether to also log to stderr.

    Returns:
        The root ticketsync logger.
    """
    if log_dir is None:
        log_dir = os.environ.get("TICKETSYNC_LOG_DIR", DEFAULT_LOG_DIR)
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    if level is None:
        level = os.environ.get("TICKETSYNC_LOG_LEVEL", DEFAULT_LOG_LEVEL)
    log_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(log_level)

    # Repeated setup in one process must not stack handlers
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    log_path = log_dir / log_file
    file_handler = RotatingFileHandler(
        log_path,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    file_handler.setLevel(log_level)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    if console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    logger.debug("Logging initialized (level=%s, file=%s)", level, log_path)
    return logger


def truncate_output(output: str, max_length: int = 2000) -> str:
    """Shorten a remote response body before it goes into a log line or error."""
    if len(output) <= max_length:
        return output
    return output[:max_length] + f"... [truncated, {len(output) - max_length} more chars]"


def sanitize_for_log(text: str) -> str:
    """Redact tokens, session cookies and passwords from ``text``."""
    result = text
    for pattern, replacement in _SENSITIVE_PATTERNS:
        result = pattern.sub(replacement, result)
    return result
