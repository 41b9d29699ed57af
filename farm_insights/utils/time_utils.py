"""
Time and date utilities for threshold rules.

Key concepts:
  - All comparisons happen on timezone-aware UTC datetimes.  Naive values
    coming from the backend are assumed to already be UTC.
  - ``days_until`` rounds partial days *up*, matching how the mobile app
    counts "expires in N days" (an item due in 2 hours is due in 1 day).
  - Every rule takes ``now`` explicitly; ``utcnow()`` is only the default.
"""

from __future__ import annotations

import math
from datetime import date, datetime, time, timezone
from typing import Any, Optional

_SECONDS_PER_DAY = 86_400


def utcnow() -> datetime:
    """Return the current UTC datetime with timezone info.

    Prefer this over ``datetime.utcnow()`` (which returns naive datetimes).
    """
    return datetime.now(tz=timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to a naive datetime, or convert an aware one to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_datetime(value: Any) -> Optional[datetime]:
    """Best-effort conversion of a raw payload value to an aware datetime.

    Accepts ``datetime``, ``date`` (midnight UTC) and ISO-8601 strings,
    including the trailing ``Z`` emitted by the JavaScript backend.

    Args:
        value: Raw field value.

    Returns:
        Aware UTC datetime, or ``None`` when the value is missing or
        cannot be parsed.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return ensure_utc(datetime.fromisoformat(text))
        except ValueError:
            return None
    return None


def days_until(target: datetime, now: datetime) -> int:
    """Return the signed number of days from ``now`` to ``target``, rounded up.

    Positive: target is in the future.
    Zero: target is now, or less than a day ago.
    Negative: target passed at least a full day ago.

    Args:
        target: Deadline (expiry, maintenance date).
        now:    Reference instant.

    Returns:
        ``ceil((target - now) / 1 day)``
    """
    delta = ensure_utc(target) - ensure_utc(now)
    return math.ceil(delta.total_seconds() / _SECONDS_PER_DAY)


def days_since(past: datetime, now: datetime) -> int:
    """Return whole days elapsed since ``past`` (floored, never negative)."""
    delta = ensure_utc(now) - ensure_utc(past)
    return max(0, delta.days)


def format_date(value: Optional[datetime]) -> str:
    """Format a date for alert messages, e.g. ``"Mar 05, 2025"``."""
    if value is None:
        return "N/A"
    return value.strftime("%b %d, %Y")
