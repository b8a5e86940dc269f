# =============================================================================
# course_core/logging/config.py
# Logging setup for the Streamlit app and the sync layer
# =============================================================================

import logging
import os
import sys
import time
from pathlib import Path
from datetime import datetime
from typing import Optional


LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Overridable through COURSES_LOG_DIR / COURSES_LOG_LEVEL
LOG_DIR = Path(os.getenv("COURSES_LOG_DIR", "logs"))

# Chatty third-party loggers kept at WARNING
QUIET_LOGGERS = ("urllib3", "requests_cache", "PIL", "watchdog")


def _level_from_env(default: int) -> int:
    name = os.getenv("COURSES_LOG_LEVEL", "").upper()
    level = logging.getLevelName(name) if name else default
    return level if isinstance(level, int) else default


def setup_logging(
    level: int = logging.INFO,
    log_to_file: bool = True,
    log_filename: Optional[str] = None,
) -> None:
    """
    Configure logging for one Streamlit process.

    Safe to call on every rerun: handlers are replaced, not stacked.

    Args:
        level: Fallback level when COURSES_LOG_LEVEL is unset
        log_to_file: Also write to LOG_DIR/app_YYYY-MM-DD.log
        log_filename: Override the daily file name
    """
    handlers = [logging.StreamHandler(sys.stdout)]

    if log_to_file:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        filename = log_filename or f"app_{datetime.now():%Y-%m-%d}.log"
        handlers.append(logging.FileHandler(LOG_DIR / filename))

    logging.basicConfig(
        level=_level_from_env(level),
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        handlers=handlers,
        force=True,
    )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger("course_core").debug("Logging initialized")


def get_logger(name: str) -> logging.Logger:
    """Module logger; pass __name__."""
    return logging.getLogger(name)


class LogContext:
    """
    Time one sync operation and log its start and end.

    Usage:
        with LogContext(logger, "read courses") as ctx:
            ctx.note(rows=12, origin="INTERNET")
        # read courses... started
        # read courses... completed (0.34s) rows=12 origin=INTERNET
    """

    def __init__(self, logger: logging.Logger, operation: str):
        self.logger = logger
        self.operation = operation
        self.start_time = None
        self.fields = {}

    def note(self, **fields) -> None:
        """Attach key=value pairs to the completion line."""
        self.fields.update(fields)

    def _suffix(self) -> str:
        return "".join(f" {key}={value}" for key, value in self.fields.items())

    def __enter__(self):
        self.start_time = time.time()
        self.logger.info(f"{self.operation}... started")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        elapsed = time.time() - self.start_time

        if exc_type is None:
            self.logger.info(f"{self.operation}... completed ({elapsed:.2f}s){self._suffix()}")
        else:
            self.logger.error(f"{self.operation}... failed ({elapsed:.2f}s): {exc_val}", exc_info=True)

        return False
