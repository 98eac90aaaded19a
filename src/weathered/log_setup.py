"""Logging setup for command-line execution."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import Any

# Attributes the client and pager attach via ``extra=``.
EVENT_FIELDS = ("context", "url", "status", "station_id", "pages_fetched")


class JsonConsoleFormatter(logging.Formatter):
    """JSON formatter for weather.gov request and paging logs.

    Request context passed through ``extra=`` (``url``, ``status`` and the like)
    is lifted into the event next to the rendered message.
    """

    def format(self, record: logging.LogRecord) -> str:
        event: dict[str, Any] = {
            "ts": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in EVENT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                event[field] = value
        if record.exc_info:
            event["exception"] = self.formatException(record.exc_info)
        return json.dumps(event, default=str)


def setup_logger(name: str = "weathered", level: int | str = logging.INFO) -> logging.Logger:
    """Create and configure a process-wide logger.

    Child loggers such as ``weathered.client`` inherit the handler.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False
    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    handler.setFormatter(JsonConsoleFormatter())
    logger.addHandler(handler)
    return logger
