"""Departure date parsing and formatting helpers."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional, Union

import dateparser

_DATEPARSER_SETTINGS = {
    "PREFER_DATES_FROM": "future",
    "RETURN_AS_TIMEZONE_AWARE": True,
    "TIMEZONE": "UTC",
    "TO_TIMEZONE": "UTC",
}


def parse_departure(value: Union[str, date, datetime]) -> Optional[datetime]:
    """Turn a departure date into an aware UTC datetime.

    ISO 8601 strings are parsed strictly; anything else ("tomorrow",
    "1 June 2025") goes through dateparser. A bare date maps to midnight.
    Returns None when the value cannot be understood.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    else:
        text = value.strip()
        if not text:
            return None
        try:
            dt = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            parsed = dateparser.parse(text, settings=_DATEPARSER_SETTINGS)
            if parsed is None:
                return None
            dt = parsed

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_api_date(value: datetime) -> str:
    """YYYY-MM-DD, the format most upstream APIs expect."""
    return value.date().isoformat()

