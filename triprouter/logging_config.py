"""Logging setup driven by ObservabilityConfig.

Components log through ``logging.getLogger(__name__)`` and attach context
with ``extra={...}``. The structured formatter keeps those extra fields
in the JSON output.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

from .config import ObservabilityConfig, get_config

# Attributes every LogRecord has; anything else came from `extra`.
_RESERVED = set(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """Render records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "time": self.formatTime(record),
            "logger": record.name,
            "level": record.levelname,
            "message": record.getMessage(),
        }
        for key, value in vars(record).items():
            if key not in _RESERVED and not key.startswith("_"):
                payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def configure_logging(config: Optional[ObservabilityConfig] = None) -> None:
    """Install a root handler using the observability settings.

    Args:
        config: Optional override, defaults to the application config.
    """
    config = config or get_config().observability

    handler = logging.StreamHandler()
    if config.structured:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(config.format))

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(config.level.upper())
