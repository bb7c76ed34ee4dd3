# src/utils/logging.py
"""Logging setup with optional JSON output and correlation ID support.

Provides:
- JSON-formatted log output for structured logging
- Correlation ID via ContextVar, set per chat event and per webhook call
- Centralized logger configuration
"""

import json
import logging
from contextvars import ContextVar
from typing import Any

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Correlation ID for tracking one chat event or webhook call across tasks
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def set_request_id(request_id: str) -> None:
    """Set the correlation ID for the current context.

    Args:
        request_id: Unique identifier for the event or request.
    """
    request_id_var.set(request_id)


def get_request_id() -> str:
    """Get the correlation ID for the current context.

    Returns:
        Current request ID, or empty string if not set.
    """
    return request_id_var.get()


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Outputs log records as JSON with timestamp, level, logger name,
    message, and optional request_id for correlation.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = get_request_id()
        if request_id:
            log_data["request_id"] = request_id

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def configure_logging(level: int = logging.INFO, log_format: str = "text") -> None:
    """Configure root logging for the application.

    Args:
        level: Logging level (default: logging.INFO).
        log_format: "json" for StructuredFormatter output, anything else
            for plain text lines.
    """
    handler = logging.StreamHandler()
    if log_format == "json":
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    logging.root.addHandler(handler)
    logging.root.setLevel(level)

    # APScheduler logs every job run at INFO
    logging.getLogger("apscheduler.executors").setLevel(logging.WARNING)
