"""Structured logging setup for seekcheck."""

from __future__ import annotations

from datetime import datetime, timezone
import json
import logging
from typing import Any


# Attributes every LogRecord carries; anything else arrived through `extra`.
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__
) | {"message", "asctime"}


class _JsonFormatter(logging.Formatter):
    """Emit one JSON object per log record, extra fields included."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(
            (key, value)
            for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        )
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, sort_keys=True, default=str)


def _has_json_handler(logger: logging.Logger) -> bool:
    return any(isinstance(handler.formatter, _JsonFormatter) for handler in logger.handlers)


def configure_logging(level: str = "WARNING") -> logging.Logger:
    """Configure the `seekcheck` logger; later calls only change the level.

    Handlers attached by others (test runners, embedding apps) are left alone.
    """

    logger = logging.getLogger("seekcheck")
    logger.setLevel(level.upper())
    if not _has_json_handler(logger):
        handler = logging.StreamHandler()
        handler.setFormatter(_JsonFormatter())
        logger.addHandler(handler)
        logger.propagate = False
    return logger


def get_logger(name: str = "seekcheck") -> logging.Logger:
    """Return a logger under the seekcheck namespace, configuring it on first use."""

    if not _has_json_handler(logging.getLogger("seekcheck")):
        configure_logging()
    return logging.getLogger(name)


def log_event(
    logger: logging.Logger,
    event: str,
    *,
    level: int = logging.INFO,
    **fields: Any,
) -> None:
    """Emit a structured event; `fields` become top-level JSON keys."""

    logger.log(level, event, extra={"event": event, **fields})
