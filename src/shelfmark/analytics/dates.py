"""Calendar-day helpers shared by the analytics calculators.

Snapshots may mix naive and aware timestamps. Naive ones are taken to be
wall-clock time in the zone being reported on; ``as_aware`` and ``elapsed``
make the two kinds comparable.
"""

from __future__ import annotations

from collections.abc import Iterator
from datetime import date, datetime, timedelta, tzinfo

ONE_DAY = timedelta(days=1)


def local_day(ts: datetime, tz: tzinfo | None = None) -> date:
    """Calendar day of ``ts`` in ``tz``.

    Aware timestamps are converted first (to system local time when ``tz`` is
    None). Naive timestamps are taken to already be local.
    """
    if ts.tzinfo is not None:
        ts = ts.astimezone(tz)
    return ts.date()


def as_aware(ts: datetime, tz: tzinfo | None = None) -> datetime:
    """``ts`` with a zone attached; naive values are read as local to ``tz``."""
    if ts.tzinfo is not None:
        return ts
    if tz is not None:
        return ts.replace(tzinfo=tz)
    return ts.astimezone()


def elapsed(start: datetime, end: datetime, tz: tzinfo | None = None) -> timedelta:
    """``end - start``, converting only when one side is naive and the other aware."""
    if (start.tzinfo is None) == (end.tzinfo is None):
        return end - start
    return as_aware(end, tz) - as_aware(start, tz)


def week_start(day: date) -> date:
    """Monday of the ISO week containing ``day``."""
    return day - timedelta(days=day.weekday())


def days_back(today: date, count: int) -> Iterator[date]:
    """The ``count`` days ending at ``today``, oldest first."""
    for offset in range(count - 1, -1, -1):
        yield today - timedelta(days=offset)
