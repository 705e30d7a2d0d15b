"""
Student Registry - Logging Setup

Configures the package logger with either a plain text formatter or a
structured JSON formatter. Request IDs set via ``set_request_id`` are attached
to every JSON log line emitted within the same async context.
"""

import contextvars
import json
import logging
from datetime import UTC, datetime
from uuid import uuid4

PACKAGE_LOGGER = "student_registry"

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_request_id_ctx: contextvars.ContextVar[str | None] = contextvars.ContextVar("request_id", default=None)

# LogRecord attributes that are never copied as extras
_RESERVED_ATTRS = frozenset(
    (
        "args",
        "msg",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "name",
        "message",
        "taskName",
    )
)


def get_request_id() -> str | None:
    """Get the request ID bound to the current context."""
    return _request_id_ctx.get()


def set_request_id(request_id: str | None = None) -> str:
    """Bind a request ID to the current context, generating one if omitted."""
    request_id = request_id or uuid4().hex
    _request_id_ctx.set(request_id)
    return request_id


class JSONFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            "timestamp": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        request_id = _request_id_ctx.get()
        if request_id:
            log_data["request_id"] = request_id

        # Add any extra fields from record.__dict__
        for key, value in record.__dict__.items():
            if key not in log_data and not key.startswith("_") and key not in _RESERVED_ATTRS:
                log_data[key] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def setup_logging(level: str = "INFO", fmt: str = "text") -> logging.Logger:
    """
    Configure the package logger.

    Args:
        level: Logging level name
        fmt: "text" for human-readable lines, "json" for structured output

    Returns:
        The configured package logger
    """
    logger = logging.getLogger(PACKAGE_LOGGER)

    # Remove existing handlers so repeated setup does not duplicate output
    logger.handlers.clear()

    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))

    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False

    return logger
