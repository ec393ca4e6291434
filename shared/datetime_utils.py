"""
Framework-agnostic date/time helpers.

MongoDB stores datetimes as UTC without an offset; depending on the
client's ``tz_aware`` option they come back naive or aware. Everything in
the service layer compares aware UTC datetimes, so values read from the
database go through ``ensure_utc`` first.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Return *value* as an aware UTC datetime.

    Naive datetimes (no ``tzinfo``) are assumed to already be UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def expires_in(seconds: int, now: Optional[datetime] = None) -> datetime:
    """Absolute UTC deadline *seconds* from *now* (default: current time)."""
    return (now or utcnow()) + timedelta(seconds=seconds)


def is_expired(expires_at: Optional[datetime], now: Optional[datetime] = None) -> bool:
    """True when *expires_at* is missing or not strictly in the future."""
    deadline = ensure_utc(expires_at)
    if deadline is None:
        return True
    return deadline <= (now or utcnow())
