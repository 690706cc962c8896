"""Structured Logging — JSON and key=value formatters for dispatch and provider logs.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Extra fields (conversation_id, operation, error_code, token counts) surfaced when present
    - A TaskPilotError passed as exc_info contributes code, category, severity and its
      ErrorContext; explicit extras win over the error's own fields
    - Tracebacks only for 5xx-class errors and non-TaskPilot exceptions; a rejected
      time format is not a stack trace
    - setup_logging is idempotent: calling it twice leaves one TaskPilot handler

Design Decisions:
    - setup_logging called once on startup via lifespan; tests may call it again
    - httpx / anthropic / sqlalchemy chatter held at WARNING so dispatch lines stay readable
"""

import json
import logging
from datetime import datetime, timezone

from taskpilot.core.errors import TaskPilotError

_EXTRA_KEYS = (
    "conversation_id", "operation", "error_code",
    "input_tokens", "output_tokens", "path", "status_code",
)
_NOISY_LOGGERS = ("httpx", "httpcore", "anthropic", "sqlalchemy.engine", "aiosqlite")


def _error_fields(record: logging.LogRecord) -> tuple[dict, bool]:
    """Fields contributed by exc_info, and whether a traceback belongs in the log."""
    if not record.exc_info or record.exc_info[1] is None:
        return {}, False
    error = record.exc_info[1]
    if not isinstance(error, TaskPilotError):
        return {}, True

    fields = {
        "error_code": error.code,
        "category": error.category.value,
        "severity": error.severity.value,
        "conversation_id": error.context.conversation_id,
        "operation": error.context.operation,
        "retry_after_ms": error.context.retry_after_ms,
    }
    return (
        {k: v for k, v in fields.items() if v is not None},
        error.http_status >= 500,
    )


def _collect(record: logging.LogRecord) -> tuple[dict, bool]:
    fields, with_traceback = _error_fields(record)
    for key in _EXTRA_KEYS:
        val = record.__dict__.get(key)
        if val is not None:
            fields[key] = val
    return fields, with_traceback


class JSONFormatter(logging.Formatter):
    """Format logs as JSON for structured logging in production."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        fields, with_traceback = _collect(record)
        log.update(fields)
        if with_traceback:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


class KeyValueFormatter(logging.Formatter):
    """Human-readable line with the structured fields appended as key=value."""

    def __init__(self):
        super().__init__("%(asctime)s %(levelname)s %(name)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        record.message = record.getMessage()
        record.asctime = self.formatTime(record)
        line = self.formatMessage(record)
        fields, with_traceback = _collect(record)
        if fields:
            line += " " + " ".join(f"{k}={v}" for k, v in fields.items())
        if with_traceback:
            line += "\n" + self.formatException(record.exc_info)
        return line


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Configure logging for the application. Replaces a previously installed handler."""
    for existing in list(logging.root.handlers):
        if getattr(existing, "_taskpilot", False):
            logging.root.removeHandler(existing)

    handler = logging.StreamHandler()
    handler._taskpilot = True
    handler.setFormatter(JSONFormatter() if fmt == "json" else KeyValueFormatter())
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return handler
