"""Logging infrastructure for Pantry Chef.

Provides centralized logging with configurable format (text/JSON) and level.
Configured via environment variables:
- LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)
- LOG_TYPE: text, json (default: text)

Text output goes through rich's RichHandler. JSON output is one object per
line for log shippers. Both carry request context (request id, owner,
timing) when available: the request id is read from a context variable set
by the HTTP middleware, the owner from `owner_logger()` adapters.
"""

import json
import logging
import os
import sys
from contextvars import ContextVar
from typing import Any, Optional

from rich.console import Console
from rich.logging import RichHandler


CONTEXT_FIELDS = ("request_id", "owner_id", "execution_time_ms")

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


class RequestContextFilter(logging.Filter):
    """Copy the current request id onto records that do not carry one."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "request_id", None) is None:
            request_id = request_id_var.get()
            if request_id is not None:
                record.request_id = request_id
        return True


def _context_of(record: logging.LogRecord) -> dict[str, Any]:
    return {
        field: getattr(record, field)
        for field in CONTEXT_FIELDS
        if getattr(record, field, None) is not None
    }


class JSONFormatter(logging.Formatter):
    """Formatter that outputs structured JSON."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Args:
            record: Log record to format.

        Returns:
            JSON string with timestamp, level, logger name, message, request
            context fields, and optional traceback.
        """
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log_data.update(_context_of(record))

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class ContextTextFormatter(logging.Formatter):
    """Message formatter for RichHandler: the message plus a compact context suffix.

    Level, time and colors are rendered by RichHandler itself.
    """

    LABELS = {"request_id": "req", "owner_id": "owner", "execution_time_ms": "ms"}

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()

        context = _context_of(record)
        if context:
            pairs = " ".join(f"{self.LABELS[field]}={value}" for field, value in context.items())
            message = f"{message} [{pairs}]"

        if record.exc_info:
            message += f"\n{self.formatException(record.exc_info)}"

        return message


def _build_handler(log_type: str) -> logging.Handler:
    if log_type == "json":
        handler: logging.Handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JSONFormatter())
    else:
        handler = RichHandler(console=Console(), show_path=False, markup=False)
        handler.setFormatter(ContextTextFormatter())
    handler.addFilter(RequestContextFilter())
    return handler


def get_logger(name: str) -> logging.Logger:
    """Create and configure logger instance.

    Args:
        name: Logger name, typically module name.

    Returns:
        Configured logger instance.
    """
    logger_instance = logging.getLogger(name)

    # Return existing logger if already configured
    if logger_instance.handlers:
        return logger_instance

    log_level_str = os.getenv("LOG_LEVEL", "INFO").upper()
    log_type = os.getenv("LOG_TYPE", "text").lower()

    log_level = getattr(logging, log_level_str, logging.INFO)
    logger_instance.setLevel(log_level)

    handler = _build_handler(log_type)
    handler.setLevel(log_level)
    logger_instance.addHandler(handler)

    return logger_instance


def owner_logger(owner_id: str) -> logging.LoggerAdapter:
    """Module logger bound to an owner, so every record carries `owner_id`."""
    return logging.LoggerAdapter(logger, {"owner_id": owner_id})


# Create module-level logger instance
logger = get_logger("pantry_chef")

# Gemini SDK and its HTTP transport log every request at INFO
logging.getLogger("google_genai").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)
