"""
Time Helpers

Timestamps are written as timezone-aware UTC so timestamptz columns hold the
right instant whatever the session TimeZone. Comparisons happen in naive UTC:
PostgreSQL hands back aware values, SQLite hands back naive ones.
"""
from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Current time as aware UTC."""
    return datetime.now(timezone.utc)


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Convert an aware datetime to naive UTC; naive values pass through."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
