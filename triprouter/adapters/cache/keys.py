"""Deterministic cache keys built from query parameters."""

from __future__ import annotations

import json
from datetime import date, datetime
from enum import Enum
from typing import Any, Mapping

KEY_DELIMITER = "|"


def _serialize(value: Any) -> str:
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (Mapping, list, tuple)):
        return json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)
    return str(value)


def make_cache_key(params: Mapping[str, Any]) -> str:
    """Build a cache key from a parameter mapping.

    ``None`` values are dropped, pairs are sorted by key and nested
    structures are serialized as sorted-key JSON, so identical logical
    queries map to the same key whatever the insertion order.

    >>> make_cache_key({"b": 2, "a": "x"})
    'a:x|b:2'
    """
    items = sorted((k, v) for k, v in params.items() if v is not None)
    return KEY_DELIMITER.join(f"{key}:{_serialize(value)}" for key, value in items)
