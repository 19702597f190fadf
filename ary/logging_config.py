"""Structured logging configuration.

Call ``setup_logging()`` once from every entrypoint (CLI / web) before
any other application code runs.  Library modules should simply use
``logging.getLogger(__name__)``; they inherit the root configuration.

Log records carry node ids, categories, escalation levels and counts.
User answers are never passed to a logger.
"""

from __future__ import annotations

import json
import logging
import os
import sys

TEXT_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s  %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

# Request lines come from our own middleware (with request ids)
_QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore")


class JsonFormatter(logging.Formatter):
    """One JSON object per line, safe for messages containing quotes."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": self.formatTime(record, DATE_FORMAT),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def setup_logging(level: str | None = None) -> None:
    """Configure the root logger with a consistent format.

    Parameters
    ----------
    level : str, optional
        Overrides ``LOG_LEVEL`` (default ``INFO``).

    With ``LOG_FORMAT=json`` records are emitted as one-line JSON objects
    for log shippers; otherwise a human-readable format is used.
    """
    log_level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    log_format = os.getenv("LOG_FORMAT", "text").lower()

    handler = logging.StreamHandler(sys.stderr)
    if log_format == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT, datefmt=DATE_FORMAT))

    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        handlers=[handler],
        force=True,
    )

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
