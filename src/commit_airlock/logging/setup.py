"""Logging configuration for commit-airlock.

Logs go to stderr so they never mix with anything a hook caller reads from
stdout. Each invocation carries a scan_id for correlating JSON records.
"""

import logging
import os
import sys
import uuid
from contextvars import ContextVar
from typing import Any, Optional, TextIO

from pythonjsonlogger import jsonlogger


DEFAULT_LOG_LEVEL = "WARNING"
DEFAULT_LOG_FORMAT = "text"
VALID_LOG_LEVELS = {"debug", "info", "warning", "error", "critical"}
VALID_LOG_FORMATS = {"text", "json"}

# Context variable for per-invocation correlation
scan_id_var: ContextVar[str] = ContextVar("scan_id", default="")


class ScanContextFilter(logging.Filter):
    """Filter that adds scan_id to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.scan_id = scan_id_var.get() or "-"
        return True


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter with renamed level/timestamp fields and a service tag."""

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        if "levelname" in log_record:
            log_record["level"] = log_record.pop("levelname")
        if "asctime" in log_record:
            log_record["timestamp"] = log_record.pop("asctime")

        log_record["service"] = "commit-airlock"

        if hasattr(record, "scan_id"):
            log_record["scan_id"] = record.scan_id


def setup_logging(
    level: Optional[str] = None,
    json_format: Optional[bool] = None,
    stream: Optional[TextIO] = None,
) -> None:
    """Configure application logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to env var
               COMMIT_AIRLOCK_LOG_LEVEL or WARNING, so a clean run is silent.
        json_format: Whether to use JSON format. Defaults to env var
                     COMMIT_AIRLOCK_LOG_FORMAT == 'json'.
        stream: Output stream. Defaults to stderr.
    """
    if level is None:
        level = os.getenv("COMMIT_AIRLOCK_LOG_LEVEL", DEFAULT_LOG_LEVEL)
    level = level.upper()
    if json_format is None:
        log_format = os.getenv("COMMIT_AIRLOCK_LOG_FORMAT", DEFAULT_LOG_FORMAT).lower()
        json_format = log_format == "json"

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(level)
    handler.addFilter(ScanContextFilter())

    if json_format:
        formatter = CustomJsonFormatter(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S%z",
        )
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - [%(scan_id)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the specified name.

    Args:
        name: Logger name (typically __name__).

    Returns:
        Logger instance.
    """
    return logging.getLogger(name)


def new_scan_id() -> str:
    """Start a new invocation context and return its scan ID."""
    scan_id = uuid.uuid4().hex[:12]
    scan_id_var.set(scan_id)
    return scan_id
