"""JSON log output for batch runs (``notes-validator --json-logs``)."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, MutableMapping

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


class StructuredFormatter(logging.Formatter):
    """One JSON object per record, with caller-supplied fields at the top level."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS and not key.startswith("_"):
                payload[key] = value
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class StructuredLogger(logging.LoggerAdapter):
    """Adapter that merges its bound fields into each call's ``extra``."""

    def process(self, msg: str, kwargs: MutableMapping[str, Any]) -> tuple[str, MutableMapping[str, Any]]:
        kwargs["extra"] = {**(self.extra or {}), **(kwargs.get("extra") or {})}
        return msg, kwargs


def configure_logging(
    level: int = logging.INFO,
    structured: bool = True,
    logger_name: str = "notes_validator",
) -> logging.Logger:
    """Route *logger_name* to a single stderr handler, JSON or plain text."""
    target = logging.getLogger(logger_name)
    target.setLevel(level)
    for existing in list(target.handlers):
        target.removeHandler(existing)

    handler = logging.StreamHandler(sys.stderr)
    if structured:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    target.addHandler(handler)
    return target


def get_logger(name: str, **bound: Any) -> StructuredLogger:
    """Logger for *name* with *bound* fields attached to every record."""
    return StructuredLogger(logging.getLogger(name), bound)
