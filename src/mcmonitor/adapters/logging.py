"""Logging configuration for the monitor process.

Installs a single stderr handler on the ``mcmonitor`` logger. Records carry
the request-scoped context (see ``logging_context``) and can be rendered
either as plain text or as newline-delimited JSON.
"""

import json
import logging
import sys
import traceback
from typing import IO

from mcmonitor.adapters.logging_context import get_log_context
from mcmonitor.core.logs import ROOT_LOGGER

# Standard LogRecord attributes that should not be treated as extra fields
_STANDARD_LOGRECORD_ATTRS = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "message",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "taskName",
        "thread",
        "threadName",
        "request_id",
    }
)

TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s [%(request_id)s] %(message)s"


class ContextFilter(logging.Filter):
    """Copies the bound log context onto every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        context = get_log_context()
        record.request_id = context.pop("request_id", "-")
        for key, value in context.items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


class NDJSONFormatter(logging.Formatter):
    """Formats each record as one JSON object per line.

    Example:
        ```python
        handler = logging.StreamHandler()
        handler.setFormatter(NDJSONFormatter())
        ```
    """

    def format(self, record: logging.LogRecord) -> str:
        """Render ``record`` as a single JSON line.

        Args:
            record: The log record to format.
        """
        obj: dict[str, str | int | float | bool | None] = {
            "timestamp": record.created,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", None),
        }

        # Add any extra attributes passed via logging call
        for key, value in record.__dict__.items():
            if key not in _STANDARD_LOGRECORD_ATTRS and isinstance(
                value, (str, int, float, bool)
            ):
                obj[key] = value

        if record.exc_info:
            exc_type, exc_value, exc_tb = record.exc_info
            if exc_type is not None:
                obj["exc_type"] = exc_type.__name__
            if exc_value is not None:
                obj["exc_message"] = str(exc_value)
            if exc_tb is not None:
                obj["exc_traceback"] = "".join(
                    traceback.format_exception(exc_type, exc_value, exc_tb)
                )

        return json.dumps(obj)


def configure_logging(
    level: str = "INFO",
    json_lines: bool = False,
    stream: IO[str] | None = None,
) -> logging.Handler:
    """Attach a stream handler to the ``mcmonitor`` logger.

    Calling this again replaces the previously installed handler.

    Args:
        level: Log level name (e.g., "INFO", "DEBUG").
        json_lines: Emit NDJSON instead of plain text.
        stream: Output stream (default: stderr).

    Returns:
        The installed handler.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    for existing in list(logger.handlers):
        if getattr(existing, "_mcmonitor_handler", False):
            logger.removeHandler(existing)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler._mcmonitor_handler = True  # type: ignore[attr-defined]
    handler.addFilter(ContextFilter())
    if json_lines:
        handler.setFormatter(NDJSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))

    logger.addHandler(handler)
    logger.setLevel(level.upper())
    return handler
