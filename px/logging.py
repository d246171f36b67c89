"""Structured logging: one JSON object per line on stderr.

px code passes its context through ``extra=`` (``argv`` of a child process,
the ``lock`` being reconciled, the python ``constraint``) and the formatter
keeps those as fields instead of folding them into the message.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any

from px.settings import load_settings

CONTEXT_FIELDS = ("argv", "cwd", "returncode", "lock", "constraint")


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                payload[field] = value
        if record.exc_info:
            payload["error"] = self.formatException(record.exc_info)
        # Paths in the context are rendered as strings.
        return json.dumps(payload, ensure_ascii=False, default=str)


def get_logger(name: str = "px") -> logging.Logger:
    """Logger for *name* with the JSON handler attached once; level from PX_LOG_LEVEL."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(stream=sys.stderr)
        handler.setFormatter(JsonFormatter())
        logger.addHandler(handler)
        logger.setLevel(load_settings().log_level)
        logger.propagate = False
    return logger
