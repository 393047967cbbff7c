"""
Formatters: JSON lines for the log file, plain text for the console.
"""
from __future__ import annotations

import json
import logging
import traceback
from datetime import datetime, timezone
from typing import Any, Optional

# Attributes passed via logger.x(..., extra={...}) that end up in the JSON line
CONTEXT_KEYS = (
    "order_id",
    "booking_id",
    "resource_id",
    "market_id",
    "generation",
    "error_code",
)


class JsonFormatter(logging.Formatter):
    """One JSON object per record, with booking context lifted from ``extra``."""

    def format(self, record: logging.LogRecord) -> str:
        log_dict: dict[str, Any] = {
            "timestamp": _utc_iso(record.created),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = {key: getattr(record, key) for key in CONTEXT_KEYS if hasattr(record, key)}
        if context:
            log_dict["context"] = context
        if record.exc_info:
            log_dict["exception"] = "".join(
                traceback.format_exception(*record.exc_info)
            ).strip()
        log_dict["lineno"] = record.lineno
        return json.dumps(log_dict, default=str, ensure_ascii=False)


def _utc_iso(created: float) -> str:
    return datetime.fromtimestamp(created, tz=timezone.utc).isoformat()


class PlainConsoleFormatter(logging.Formatter):
    """Human-readable console format."""

    def __init__(self, fmt: Optional[str] = None, datefmt: Optional[str] = None) -> None:
        super().__init__(
            fmt=fmt or "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt=datefmt or "%Y-%m-%d %H:%M:%S",
        )
