"""Structured JSON logging for the settings engine and CLI."""

from __future__ import annotations

from datetime import datetime, timezone
import logging
from typing import Any, Dict

import orjson

# Attributes every LogRecord carries; anything else came in through ``extra``
_STANDARD_RECORD_ATTRS = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "asctime"}

# Extra fields that may hold a secret value; logged as a mask
REDACTED_FIELDS = frozenset({"value", "password", "api_key", "secret"})
REDACTED = "***"


class JsonFormatter(logging.Formatter):
    """Render each record as one JSON object with ``extra`` fields merged in.

    Extra fields named in REDACTED_FIELDS are masked so a setting's value
    never reaches the log stream; log setting names instead.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key in _STANDARD_RECORD_ATTRS or key.startswith("_"):
                continue
            payload[key] = REDACTED if key in REDACTED_FIELDS else value

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return orjson.dumps(payload, default=repr).decode()


def configure_logging(level: str = "INFO", *, name: str = "saas_settings") -> logging.Logger:
    """Send all records to stderr as JSON lines and return the named logger."""
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level.upper())
    return logging.getLogger(name)


__all__ = ["JsonFormatter", "REDACTED", "configure_logging"]
