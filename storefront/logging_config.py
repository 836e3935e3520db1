"""
Structured Logging

Startup and build diagnostics carry their context (owning module, extension
point, hook, route identity, lifecycle phase) as ``extra=`` fields. The JSON
formatter lifts those fields into the document; the console format appends
them as ``key=value`` pairs so overrides and failures stay attributable.
"""

import json
import logging
from datetime import datetime, timezone

CONTEXT_KEYS = ("module", "extension_point", "hook", "route", "phase", "duration_ms", "error_code")

CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Third-party loggers that would drown out kernel diagnostics
QUIET_LOGGERS = ("uvicorn", "uvicorn.access", "watchfiles", "httpx")


def _context(record: logging.LogRecord) -> dict:
    return {key: getattr(record, key) for key in CONTEXT_KEYS if hasattr(record, key)}


class StructuredFormatter(logging.Formatter):
    """One JSON document per line."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_context(record),
        }
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data, default=str)


class ConsoleFormatter(logging.Formatter):
    def __init__(self):
        super().__init__(CONSOLE_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = _context(record)
        if context:
            line += " [" + " ".join(f"{key}={value}" for key, value in context.items()) + "]"
        return line


def configure_logging(log_level: str = "INFO", json_format: bool = False) -> None:
    """
    Install a single stream handler on the root logger.

    Args:
        log_level: Level for the root and ``storefront`` loggers
        json_format: Emit JSON lines instead of the console format
    """
    level = getattr(logging, log_level.upper())
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter() if json_format else ConsoleFormatter())
    root_logger.addHandler(handler)

    logging.getLogger("storefront").setLevel(level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
