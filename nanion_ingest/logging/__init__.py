from .error_log import ErrorLogBuffer
from .init import get_logger, log_summary, reset_logging, set_debug, setup_logging, task_logger

__all__ = [
    "ErrorLogBuffer",
    "get_logger",
    "log_summary",
    "reset_logging",
    "set_debug",
    "setup_logging",
    "task_logger",
]
