"""
Clock sources and epoch day/week indexing.

All day and week boundaries are UTC: the index is the number of whole
milliseconds since the Unix epoch divided by the length of a day (or of a
fixed 7-day bucket). Week buckets are anchored at the epoch, not ISO weeks.
"""

from __future__ import annotations
from datetime import datetime, timedelta, timezone

MS_PER_DAY = 24 * 60 * 60 * 1000
MS_PER_WEEK = 7 * MS_PER_DAY


def to_utc(value: datetime) -> datetime:
    """Return an aware UTC datetime; naive values are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def epoch_millis(value: datetime) -> int:
    moment = to_utc(value)
    delta = moment - datetime(1970, 1, 1, tzinfo=timezone.utc)
    return (delta.days * 86400 + delta.seconds) * 1000 + delta.microseconds // 1000


def day_index(now: datetime) -> int:
    """Days since the Unix epoch (UTC)."""
    return epoch_millis(now) // MS_PER_DAY


def week_index(now: datetime) -> int:
    """7-day buckets since the Unix epoch."""
    return epoch_millis(now) // MS_PER_WEEK


class Clock:
    """Supplies the current instant. Subclass to inject time in tests."""

    def now(self) -> datetime:
        raise NotImplementedError

    def today_index(self) -> int:
        return day_index(self.now())

    def current_week_index(self) -> int:
        return week_index(self.now())


class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock(Clock):
    """A clock frozen at one instant until advanced."""

    def __init__(self, instant: datetime):
        self._instant = to_utc(instant)

    def now(self) -> datetime:
        return self._instant

    def advance(self, **kwargs) -> datetime:
        """Move the clock forward by a timedelta built from kwargs (days=1, hours=3...)."""
        self._instant = self._instant + timedelta(**kwargs)
        return self._instant

    def set(self, instant: datetime) -> None:
        self._instant = to_utc(instant)


system_clock = SystemClock()
