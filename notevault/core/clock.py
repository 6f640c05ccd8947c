"""Wall-clock access; services take a Clock so tests can move time forward."""

import math
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite drops tzinfo on round trip)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def minutes_until(deadline: datetime, now: datetime) -> int:
    """Whole minutes remaining until deadline, rounded up (0 if already passed)."""
    remaining = (as_utc(deadline) - now) / timedelta(minutes=1)
    return max(0, math.ceil(remaining))
