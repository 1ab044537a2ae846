"""
Logging setup for the relay.

Every line carries the correlation id of the HTTP request or WebSocket
connection being served, plus the connection's context fields
(connection_id, session_id, role). Lines are printed to stdout and, when
LOKI_ENABLED is set, shipped to Loki as JSON.
"""

import json
import logging
import sys
from contextvars import ContextVar
from typing import Any

from screen_relay.constants import LOKI_MAX_LOG_SIZE_BYTES
from screen_relay.middlewares.correlation_id import get_correlation_id
from screen_relay.settings import app_settings

log_context: ContextVar[dict[str, Any]] = ContextVar("log_context", default={})


def set_log_context(**fields: Any) -> None:
    """
    Merge fields into the current task's log context.

    Fields set to None are dropped. The stored dict is replaced rather
    than mutated, so tasks that inherited it are unaffected.
    """
    merged = {**log_context.get(), **fields}
    log_context.set({k: v for k, v in merged.items() if v is not None})


def get_log_context() -> dict[str, Any]:
    return log_context.get()


def clear_log_context() -> None:
    log_context.set({})


class ConsoleFormatter(logging.Formatter):
    """
    `2024-05-01 12:00:00 [3f2a9c1d] INFO relay: Attached | session_id=ab12cd34`

    Warnings and above also name the emitting function.
    """

    def __init__(self) -> None:
        super().__init__(datefmt="%Y-%m-%d %H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        line = (
            f"{self.formatTime(record, self.datefmt)} "
            f"[{get_correlation_id() or '-'}] {record.levelname}"
        )
        if record.levelno >= logging.WARNING:
            line += f" {record.module}.{record.funcName}:{record.lineno}"
        line += f": {record.getMessage()}"

        context = get_log_context()
        if context:
            line += " | " + " ".join(f"{k}={v}" for k, v in context.items())

        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class LokiJSONFormatter(logging.Formatter):
    """One JSON object per line, with context fields at the top level."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "environment": app_settings.ENVIRONMENT,
            **get_log_context(),
        }
        correlation_id = get_correlation_id()
        if correlation_id:
            entry["request_id"] = correlation_id
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        line = json.dumps(entry, default=str)
        if len(line) > LOKI_MAX_LOG_SIZE_BYTES:
            # Loki drops oversized lines entirely
            overflow = len(line) - LOKI_MAX_LOG_SIZE_BYTES + 64
            entry["message"] = entry["message"][:-overflow] + " [truncated]"
            line = json.dumps(entry, default=str)
        return line


def _loki_handler() -> logging.Handler | None:
    try:
        from logging_loki import LokiHandler
    except ImportError:
        logging.getLogger(__name__).warning(
            "LOKI_ENABLED is set but python-logging-loki is not installed"
        )
        return None

    handler = LokiHandler(
        url=f"{app_settings.LOKI_URL}/loki/api/v{app_settings.LOKI_VERSION}/push",
        tags={"application": "screen-relay", "environment": app_settings.ENVIRONMENT},
        version=app_settings.LOKI_VERSION,
    )
    handler.setFormatter(LokiJSONFormatter())
    return handler


def setup_logging() -> logging.Logger:
    root = logging.getLogger()
    root.setLevel(app_settings.LOG_LEVEL.upper())
    root.handlers.clear()

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(ConsoleFormatter())
    root.addHandler(console)

    if app_settings.LOKI_ENABLED:
        handler = _loki_handler()
        if handler is not None:
            root.addHandler(handler)

    # Keep pytest output clean
    if sys.argv[0].split("/")[-1] == "pytest":
        logging.disable(logging.ERROR)

    return root


logger = setup_logging()
