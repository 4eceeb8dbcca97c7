from __future__ import annotations

from datetime import date, datetime, time, timezone
from typing import Any


def as_utc(dt: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_timestamp(value: Any) -> datetime:
    """Coerce a YAML/JSON timestamp value to an aware UTC datetime.

    PyYAML already yields datetime/date objects for unquoted timestamps;
    JSON (and quoted YAML) yields ISO-8601 strings. Raises ValueError otherwise.
    """
    if isinstance(value, datetime):
        return as_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        return as_utc(datetime.fromisoformat(text))
    raise ValueError(f"not a timestamp: {value!r}")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
