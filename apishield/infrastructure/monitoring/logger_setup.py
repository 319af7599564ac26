"""Centralized logging configuration for the apishield application.

Sets up standard Python logging with appropriate levels, formatters,
and handlers (console, optional file). The API component logger gets its
own formatter producing ``[<ISO-8601 timestamp>] [API] <message>`` lines.
"""

import logging
import sys
from datetime import datetime, timezone
from typing import Optional

DEFAULT_LOG_LEVEL = logging.INFO
DEFAULT_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DEFAULT_LOG_FILE = None

API_LOGGER_NAME = "apishield.api"
API_LOG_TAG = "API"

logger = logging.getLogger(__name__)


class ApiLogFormatter(logging.Formatter):
    """Formats records as ``[2024-01-01T12:00:00.000Z] [API] message``."""

    def __init__(self, tag: str = API_LOG_TAG):
        super().__init__()
        self.tag = tag

    def formatTime(self, record: logging.LogRecord, datefmt: Optional[str] = None) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        return created.isoformat(timespec="milliseconds").replace("+00:00", "Z")

    def format(self, record: logging.LogRecord) -> str:
        line = f"[{self.formatTime(record)}] [{self.tag}] {record.getMessage()}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def get_api_logger() -> logging.Logger:
    return logging.getLogger(API_LOGGER_NAME)


def log_api(message: str, level: int = logging.INFO) -> None:
    """Emits one API component log line. Never raises."""
    try:
        get_api_logger().log(level, message)
    except Exception:
        logger.debug("Dropped API log line", exc_info=True)


def setup_logging(
    log_level: int = DEFAULT_LOG_LEVEL,
    log_format: str = DEFAULT_LOG_FORMAT,
    log_file: Optional[str] = DEFAULT_LOG_FILE
) -> None:
    """Configures the root logger and the API component logger.

    Args:
        log_level: The minimum logging level (e.g., logging.DEBUG, logging.INFO).
        log_format: The format string for non-API log messages.
        log_file: Optional path to a file for logging output.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers so repeated setup doesn't duplicate output
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    api_logger = get_api_logger()
    for handler in api_logger.handlers[:]:
        api_logger.removeHandler(handler)
    api_logger.setLevel(log_level)
    api_logger.propagate = False

    formatter = logging.Formatter(log_format)
    api_formatter = ApiLogFormatter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    api_console_handler = logging.StreamHandler(sys.stdout)
    api_console_handler.setLevel(log_level)
    api_console_handler.setFormatter(api_formatter)
    api_logger.addHandler(api_console_handler)

    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(log_level)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)

            api_file_handler = logging.FileHandler(log_file, encoding='utf-8')
            api_file_handler.setLevel(log_level)
            api_file_handler.setFormatter(api_formatter)
            api_logger.addHandler(api_file_handler)
            logging.info(f"Logging to file: {log_file}")
        except OSError as e:
            logging.error(f"Failed to set up file logging to {log_file}: {e}", exc_info=True)

    logging.info(f"Logging configured. Level={logging.getLevelName(log_level)}")
