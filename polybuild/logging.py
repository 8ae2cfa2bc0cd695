"""Structured logging helpers: JSON lines with context."""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "name": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def get_logger(name: str = "polybuild", level: str | int | None = None) -> logging.Logger:
    """Return *name*'s logger, attaching the JSON stderr handler once.

    Child loggers (``polybuild.core``) propagate to the package logger, so
    only the root ``polybuild`` logger gets a handler.
    """
    logger = logging.getLogger(name)
    root_name = name.split(".", 1)[0]
    owner = logging.getLogger(root_name)
    if not owner.handlers:
        handler = logging.StreamHandler(stream=sys.stderr)
        handler.setFormatter(JsonFormatter())
        owner.addHandler(handler)
        owner.setLevel(logging.INFO)
    if level is not None:
        owner.setLevel(level.upper() if isinstance(level, str) else level)
    return logger
