"""Structured logging for the build scripts.

Extra attributes passed via `extra=` (e.g. the list of written files)
are emitted next to the message.
"""
from __future__ import annotations

import json
import logging
import os
import sys
from typing import Any

_STANDARD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


def record_extras(record: logging.LogRecord) -> dict[str, Any]:
    return {k: v for k, v in vars(record).items() if k not in _STANDARD_ATTRS}


class StructuredFormatter(logging.Formatter):
    """One JSON object per line, or `LEVEL logger: message key=value ...`."""

    def __init__(self, use_json: bool = True) -> None:
        super().__init__()
        self.use_json = use_json

    def format(self, record: logging.LogRecord) -> str:
        extras = record_extras(record)
        if record.exc_info:
            extras["exception"] = self.formatException(record.exc_info)
        if self.use_json:
            return json.dumps(
                {
                    "timestamp": self.formatTime(record),
                    "level": record.levelname,
                    "logger": record.name,
                    "message": record.getMessage(),
                    **extras,
                },
                default=str,
            )
        tail = "".join(f" {k}={v!r}" for k, v in extras.items())
        return f"{record.levelname} {record.name}: {record.getMessage()}{tail}"


def setup_logging(level: str | None = None, use_json: bool | None = None) -> None:
    level = level or os.getenv("BRANDKIT_LOG_LEVEL", "INFO")
    if use_json is None:
        use_json = os.getenv("BRANDKIT_LOG_JSON", "").lower() in ("1", "true", "yes")
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(StructuredFormatter(use_json=use_json))
        root.addHandler(handler)
