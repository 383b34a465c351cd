"""
Logging utilities and decorators for RefHarmonizer
"""

import time
from typing import Optional

from .config import LOG_EMOJIS, get_log_config
from .custom_logger import CustomLogger


def get_logger(name: str = "RefHarmonizer"):
    """Get the shared package logger"""
    return CustomLogger().custlogger(name=name)


def performance_log(logger, operation: str, duration: float, **info) -> None:
    """Report how long an operation took, louder when it was slow."""
    threshold_ms = get_log_config()["performance_threshold_ms"]
    details = " ".join(f"{k}={v}" for k, v in info.items())
    msg = f"{LOG_EMOJIS['performance']} {operation} took {duration * 1000:.1f}ms {details}".rstrip()
    if duration * 1000 >= threshold_ms:
        logger.info(msg)
    else:
        logger.debug(msg)


class LogContext:
    """Context manager for logging with automatic cleanup"""

    def __init__(self, operation: str, logger=None):
        self.operation = operation
        self.logger = logger or get_logger()
        self.start_time = None
        self.info = {}

    def __enter__(self):
        self.start_time = time.perf_counter()
        self.logger.debug(f"{LOG_EMOJIS['start']} Starting {self.operation}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration = time.perf_counter() - self.start_time

        if exc_type is None:
            performance_log(self.logger, self.operation, duration, status='success', **self.info)
        else:
            self.logger.error(f"{LOG_EMOJIS['error']} {self.operation} failed: {str(exc_val)}")

        return False  # Don't suppress exceptions


def batch_progress_logger(total_items: int, batch_size: int = 100, logger=None):
    """Helper for logging progress in batch operations"""
    logger = logger or get_logger()

    def log_progress(current: int, total: Optional[int] = None):
        total = total if total is not None else total_items
        if total <= 0:
            return
        if current % batch_size == 0 or current == total:
            percentage = (current / total) * 100
            progress_bar = "█" * int(percentage // 5) + "░" * (20 - int(percentage // 5))
            logger.info(f"{LOG_EMOJIS['progress']} Progress: [{progress_bar}] {percentage:.1f}% ({current}/{total})")

    return log_progress
