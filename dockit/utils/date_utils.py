"""
Date and time utility functions used across the project.

Notes:
- All "UTC" helpers use timezone-aware datetimes with `timezone.utc`.
- `to_utc` assumes naive datetimes are already in UTC and only attaches tzinfo
  (it does not perform any timezone conversion for naive datetimes).
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional

UTC = timezone.utc

SECONDS_PER_DAY = 86400


def now_utc() -> datetime:
    """Return current UTC datetime (timezone-aware)."""
    return datetime.now(UTC)


def to_utc(dt: datetime) -> datetime:
    """
    Convert a datetime to UTC.

    - If naive, assumes it's already in UTC and only attaches tzinfo.
    - If aware, converts to UTC.
    """
    if not isinstance(dt, datetime):
        raise TypeError("Input must be a datetime object")
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def resolve_now(now: Optional[datetime]) -> datetime:
    """Use the caller's clock when given, otherwise the current UTC time."""
    return to_utc(now) if now is not None else now_utc()


def utc_date(dt: datetime) -> date:
    """Calendar day of a timestamp in UTC."""
    return to_utc(dt).date()
