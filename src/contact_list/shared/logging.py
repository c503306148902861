"""
Structured JSON logging configuration.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from contact_list.config import get_settings
from contact_list.shared.correlation import get_correlation_id


class JSONFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    _RESERVED = {
        # standard LogRecord attributes
        "name", "msg", "args", "levelname", "levelno", "pathname", "filename",
        "module", "exc_info", "exc_text", "stack_info", "lineno", "funcName",
        "created", "msecs", "relativeCreated", "thread", "threadName",
        "processName", "process", "message", "taskName",
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        correlation_id = get_correlation_id()
        if correlation_id:
            log_data["correlation_id"] = correlation_id

        # Standard logging extra=... fields
        for key, value in record.__dict__.items():
            if key in self._RESERVED:
                continue
            if key in log_data:
                log_data[f"extra_{key}"] = value
            else:
                log_data[key] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance.

    Args:
        name: Logger name (typically __name__).

    Returns:
        Logger that propagates to the root JSON handler.
    """
    return logging.getLogger(name)


def setup_logging(level: str | None = None) -> None:
    """Configure structured JSON logging on the root logger."""
    level = (level or get_settings().log_level).upper()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [handler]

    # SQLAlchemy noise control; engine echo is driven by Settings.sql_echo
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.dialects").setLevel(logging.WARNING)
