"""Logging configuration.

Plain text lines for development, JSON lines (``LOG_JSON=1``) for log
aggregation. Call ``setup_logging`` once from the app factory; modules keep
using ``logging.getLogger(__name__)``.
"""
from __future__ import annotations

import json
import logging
import sys
import traceback
from typing import Any, Dict

from utils.timezone_utils import now_utc

# Attributes copied from ``extra=`` into the JSON payload when present.
_CONTEXT_FIELDS = (
    "request_id", "user_id", "sweet_id", "endpoint", "method",
    "status_code", "duration_ms", "error_code",
)


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj: Dict[str, Any] = {
            "timestamp": now_utc().isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_obj["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": traceback.format_exception(*record.exc_info),
            }

        for attr in _CONTEXT_FIELDS:
            if hasattr(record, attr):
                log_obj[attr] = getattr(record, attr)

        return json.dumps(log_obj, default=str)


def setup_logging(level: str = "INFO", json_format: bool = False) -> logging.Logger:
    """Configure the root logger with a single stdout handler.

    Safe to call more than once; existing handlers are replaced.
    """
    root_logger = logging.getLogger()
    log_level = getattr(logging, level.upper(), logging.INFO)
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
    root_logger.addHandler(handler)

    # pymongo is chatty at DEBUG
    logging.getLogger("pymongo").setLevel(max(log_level, logging.INFO))
    return root_logger


__all__ = ["JSONFormatter", "setup_logging"]
