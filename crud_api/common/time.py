"""
Time Utilities

Entity timestamps are stored as naive UTC and exposed as UTC-aware values.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

UTC = timezone.utc

# Smallest step the database DateTime column can represent
TIMESTAMP_RESOLUTION = timedelta(microseconds=1)


def utc_now() -> datetime:
    """Current UTC time (timezone-aware)."""
    return datetime.now(UTC)


def utc_now_naive() -> datetime:
    """Current UTC time as stored in the database."""
    return utc_now().replace(tzinfo=None)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive values, convert aware values to UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def to_utc_naive(dt: Optional[datetime]) -> Optional[datetime]:
    """Convert a datetime to naive UTC for storage or comparison in queries."""
    aware = ensure_utc(dt)
    if aware is None:
        return None
    return aware.replace(tzinfo=None)


def next_timestamp(previous: Optional[datetime]) -> datetime:
    """
    Timestamp for a modification that follows `previous`.

    Returns the current naive UTC time, bumped past `previous` when the
    clock has not moved forward (same tick, or clock skew).
    """
    now = utc_now_naive()
    previous = to_utc_naive(previous)
    if previous is not None and now <= previous:
        return previous + TIMESTAMP_RESOLUTION
    return now
