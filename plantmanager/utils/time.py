"""Utility functions for time handling.

All timestamps are UTC and timezone-aware. Watering instants are persisted as
absolute epoch milliseconds so downtime between runs is reflected on load.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone, tzinfo
from typing import Any

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def utc_now() -> datetime:
    """Return current UTC time as an aware datetime."""
    return datetime.now(timezone.utc)


def iso_now(*, timespec: str | None = None) -> str:
    """Return current UTC time as an ISO8601 string (timezone-aware)."""
    now = utc_now()
    if timespec:
        return now.isoformat(timespec=timespec)
    return now.isoformat()


def ensure_utc(dt: datetime) -> datetime:
    """Attach UTC to naive datetimes and convert aware ones to UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def truncate_to_ms(dt: datetime) -> datetime:
    """Drop sub-millisecond precision so the value survives an epoch-ms round trip."""
    dt = ensure_utc(dt)
    return dt.replace(microsecond=(dt.microsecond // 1000) * 1000)


def to_epoch_ms(dt: datetime) -> int:
    """Convert a datetime to integer milliseconds since the Unix epoch."""
    delta = ensure_utc(dt) - _EPOCH
    return (delta.days * 86_400 + delta.seconds) * 1000 + delta.microseconds // 1000


def from_epoch_ms(value: int) -> datetime:
    """Convert epoch milliseconds to an aware UTC datetime."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"epoch milliseconds must be an int, got {type(value).__name__}")
    return _EPOCH + timedelta(milliseconds=value)


def format_hour(dt: datetime, tz: tzinfo | None = None) -> str:
    """Return the HH:MM label of ``dt`` (UTC unless ``tz`` is given)."""
    dt = ensure_utc(dt)
    if tz is not None:
        dt = dt.astimezone(tz)
    return dt.strftime("%H:%M")


def coerce_datetime(value: Any) -> datetime | None:
    """
    Coerce value to datetime, returning None on failure.

    Accepts datetimes, ISO-8601 strings (``Z`` suffix allowed) and integer
    epoch milliseconds.

    Returns:
        Datetime in timezone.utc or None if invalid
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, int):
        try:
            return from_epoch_ms(value)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        raw = value.strip()
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(raw)
        except ValueError:
            return None
    else:
        return None

    return ensure_utc(parsed)
