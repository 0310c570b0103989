from __future__ import annotations

import logging
import sys

"""Logging initialization with labeled prefixes.

Provides:
- INFO|WARN|ERROR|SUMMARY labeled prefixes on stdout
- Per-task logging contexts (LoggerAdapter) so every message emitted while a
  file is processed carries that file's name, whichever worker thread logs it

Handlers of the standard logging module take a lock around emit, so worker
threads logging concurrently are serialized onto the single stdout handler.
A handler that fails to emit reports through Handler.handleError and never
raises into the pipeline.
"""

__all__ = [
    "setup_logging",
    "get_logger",
    "task_logger",
    "log_summary",
    "reset_logging",
    "set_debug",
]

LOGGER_NAME = "nanion_ingest"

# Custom SUMMARY level (between INFO=20 and WARNING=30)
SUMMARY_LEVEL = 25

_logger: logging.Logger | None = None


class LabeledFormatter(logging.Formatter):
    """Formats records as ``LABEL [file] message``.

    The ``[file]`` part is only present for records emitted through a task
    logger (see task_logger).
    """

    LEVEL_LABELS = {
        logging.DEBUG: "DEBUG",
        logging.INFO: "INFO",
        logging.WARNING: "WARN",
        logging.ERROR: "ERROR",
        logging.CRITICAL: "CRITICAL",
        SUMMARY_LEVEL: "SUMMARY",
    }

    def format(self, record: logging.LogRecord) -> str:
        level_label = self.LEVEL_LABELS.get(record.levelno, record.levelname)
        file_name = getattr(record, "file_name", None)
        if file_name:
            return f"{level_label} [{file_name}] {record.getMessage()}"
        return f"{level_label} {record.getMessage()}"


def setup_logging() -> logging.Logger:
    """Configure the package logger (idempotent).

    Module loggers (``logging.getLogger(__name__)`` inside nanion_ingest)
    propagate to this logger and share its handler.
    """
    global _logger

    if _logger is not None:
        return _logger

    logging.addLevelName(SUMMARY_LEVEL, "SUMMARY")

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.INFO)

    # Clear any existing handlers to avoid duplication
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(logging.INFO)
    handler.setFormatter(LabeledFormatter())
    logger.addHandler(handler)

    # Prevent propagation to root logger to avoid duplicate output
    logger.propagate = False

    _logger = logger
    return logger


def get_logger() -> logging.Logger:
    if _logger is None:
        return setup_logging()
    return _logger


def task_logger(file_name: str, base: logging.Logger | None = None) -> logging.LoggerAdapter:
    """Return a logging context bound to one file.

    Each extraction task gets its own adapter; nothing about it is shared
    with other tasks except the underlying (thread-safe) logger.
    """
    return logging.LoggerAdapter(base or get_logger(), {"file_name": file_name})


def log_summary(message: str) -> None:
    """Log a message at SUMMARY level."""
    get_logger().log(SUMMARY_LEVEL, message)


def set_debug(enabled: bool = True) -> None:
    """Switch the package logger and its handlers to DEBUG (or back to INFO)."""
    logger = get_logger()
    level = logging.DEBUG if enabled else logging.INFO
    for h in logger.handlers:
        h.setLevel(level)
    logger.setLevel(level)


def reset_logging() -> None:
    """Reset the global logger state. Mainly for testing purposes."""
    global _logger
    _logger = None
