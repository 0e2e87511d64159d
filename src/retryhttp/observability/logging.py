"""Logging setup for the retryhttp logger hierarchy.

Library modules log through logging.getLogger("retryhttp.<area>"). This module
attaches one handler to the "retryhttp" logger in either a human-readable
line format or JSON Lines for log aggregation.

Example:
    >>> from retryhttp.observability import configure_logging
    >>> configure_logging(level="DEBUG", format="json")
"""

from __future__ import annotations

import logging
import sys
from datetime import UTC, datetime
from typing import TYPE_CHECKING, TextIO

import orjson

if TYPE_CHECKING:
    from retryhttp.foundation.config import LoggingSettings

ROOT_LOGGER = "retryhttp"
_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# LogRecord attributes that are not user-supplied `extra` fields
_RESERVED = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}


class JsonFormatter(logging.Formatter):
    """One JSON object per record: timestamp, level, logger, event, plus extras."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "event": record.getMessage(),
        }
        entry.update({k: v for k, v in vars(record).items() if k not in _RESERVED})
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return orjson.dumps(entry, default=str, option=orjson.OPT_NON_STR_KEYS).decode()


def configure_logging(
    level: str = "INFO",
    format: str = "text",  # noqa: A002 - mirrors LoggingSettings.format
    *,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Configure the retryhttp logger. Format: "text" (human), "json" (machine), "none"."""
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    match format:
        case "text":
            handler: logging.Handler = logging.StreamHandler(stream or sys.stderr)
            handler.setFormatter(logging.Formatter(_TEXT_FORMAT))
        case "json":
            handler = logging.StreamHandler(stream or sys.stdout)
            handler.setFormatter(JsonFormatter())
        case "none":
            handler = logging.NullHandler()
        case _:
            raise ValueError(f"Unknown format: {format}. Use 'text', 'json', or 'none'")

    logger.addHandler(handler)
    logger.propagate = False
    return logger


def configure_logging_from_settings(settings: LoggingSettings | None = None) -> logging.Logger:
    """Apply LoggingSettings (cached global settings by default)."""
    if settings is None:
        from retryhttp.foundation.config import get_settings
        settings = get_settings().logging
    return configure_logging(settings.level, settings.format)
