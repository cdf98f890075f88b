"""Diagnostic logging setup for lineloop.

REPL output (results, command output, errors in user code) goes to stdout
through the display. Everything configured here is diagnostic and goes to
stderr, plus an optional file.

Usage:
    from lineloop.core.logging_config import configure_logging

    configure_logging(level="DEBUG")

    logger = logging.getLogger(__name__)

Environment Variables:
    LINELOOP_LOG_LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    LINELOOP_LOG_FORMAT: Output format ("text" or "json")
    LINELOOP_LOG_FILE: Optional log file path
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime
from typing import Any, Literal

TEXT_FORMAT = "%(asctime)s.%(msecs)03d - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

DEFAULT_LEVEL = "WARNING"

# Attributes every LogRecord carries; anything else came in through ``extra=``.
_STANDARD_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "exc_info",
        "exc_text",
        "thread",
        "threadName",
        "taskName",
        "message",
    }
)

_configured = False


class JsonFormatter(logging.Formatter):
    """Format records as one JSON object per line.

    {
        "timestamp": "2026-10-17T14:30:00.123000",
        "level": "DEBUG",
        "logger": "lineloop.core.accumulator",
        "message": "buffer continued: 2 lines",
        "extra": {...}
    }
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        extra = {k: v for k, v in record.__dict__.items() if k not in _STANDARD_ATTRS}
        if extra:
            log_data["extra"] = extra

        return json.dumps(log_data, default=str)


def configure_logging(
    level: str | None = None,
    format: Literal["text", "json"] | None = None,
    file_path: str | None = None,
    force: bool = False,
) -> None:
    """Configure the root logger.

    Called once at startup; later calls are ignored unless ``force=True``.
    Explicit arguments win over the LINELOOP_LOG_* environment variables.

    Args:
        level: Log level name. Defaults to LINELOOP_LOG_LEVEL or WARNING.
        format: "text" or "json". Defaults to LINELOOP_LOG_FORMAT or "text".
        file_path: Extra log file. Defaults to LINELOOP_LOG_FILE.
        force: Reconfigure even if already configured.

    Raises:
        ValueError: If the level name is not a logging level.
    """
    global _configured
    if _configured and not force:
        return

    level = level or os.environ.get("LINELOOP_LOG_LEVEL", DEFAULT_LEVEL)
    format = format or os.environ.get("LINELOOP_LOG_FORMAT", "text")  # type: ignore
    file_path = file_path or os.environ.get("LINELOOP_LOG_FILE")

    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    if format == "json":
        formatter: logging.Formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(TEXT_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if file_path:
        file_handler = logging.FileHandler(file_path)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    _configured = True
