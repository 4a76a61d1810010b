"""
Structured JSON logging configuration.

This module provides:
- JSON-formatted log output for log shipping (Loki, CloudWatch, journald)
- Request ID propagation via contextvars
- Consistent log structure across API, services and the alert dispatcher

Log Structure (JSON):
{
    "timestamp": "2024-01-15T10:30:00Z",
    "level": "INFO",
    "logger": "services.alert_dispatcher",
    "message": "Alert email delivered",
    "request_id": "abc-123",
    "extra": { ... }
}

Usage:
    from core.logging_config import setup_logging

    # At app startup
    setup_logging()

    # Anywhere (request_id is auto-propagated by middleware)
    logger.info("Reading evaluated", extra={"reading_id": "..."})
"""

import json
import logging
import os
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

# =============================================================================
# REQUEST ID CONTEXT
# =============================================================================
# ContextVar keeps request_id coroutine-safe: concurrent dispatches each
# log with their own request's id.

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def get_request_id() -> Optional[str]:
    """Get the current request ID from context (coroutine-safe)."""
    return request_id_var.get()


def set_request_id(request_id: str) -> None:
    """Set the request ID in context for the current request/coroutine."""
    request_id_var.set(request_id)


def clear_request_id() -> None:
    """Clear the request ID (call at end of request)."""
    request_id_var.set(None)


# =============================================================================
# JSON FORMATTER
# =============================================================================

_STANDARD_ATTRS = frozenset({
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "taskName", "message",
})


class JSONFormatter(logging.Formatter):
    """
    Single-line JSON log formatter.

    All timestamps are UTC. Fields passed via ``extra=`` are nested under
    the ``extra`` key so they never collide with the base structure.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as single-line JSON."""
        log_entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = get_request_id()
        if request_id:
            log_entry["request_id"] = request_id

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        extra = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _STANDARD_ATTRS and not key.startswith("_")
        }
        if extra:
            log_entry["extra"] = extra

        return json.dumps(log_entry, default=str, ensure_ascii=False)


# =============================================================================
# LOGGING SETUP
# =============================================================================

def setup_logging(
    level: str = "INFO",
    json_format: bool = True,
    include_uvicorn: bool = True
) -> None:
    """
    Configure structured logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: If True, use JSON format; if False, use human-readable format
        include_uvicorn: If True, also route uvicorn loggers through the root handler

    Environment Variables:
        LOG_LEVEL: Override the log level (default: INFO)
        LOG_FORMAT: Override format ("json" or "text", default: json)
    """
    level = os.environ.get("LOG_LEVEL", level).upper()
    json_format = os.environ.get("LOG_FORMAT", "json" if json_format else "text").lower() == "json"

    handler = logging.StreamHandler(sys.stdout)

    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        ))

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [handler]

    for logger_name in ["core", "api", "services", "repositories", "clients"]:
        logger = logging.getLogger(logger_name)
        logger.setLevel(level)
        logger.handlers = []  # Inherit from root
        logger.propagate = True

    if include_uvicorn:
        for logger_name in ["uvicorn", "uvicorn.error", "uvicorn.access"]:
            logger = logging.getLogger(logger_name)
            logger.handlers = []
            logger.propagate = True

    logging.getLogger(__name__).info(
        "Logging configured",
        extra={"level": level, "format": "json" if json_format else "text"}
    )
