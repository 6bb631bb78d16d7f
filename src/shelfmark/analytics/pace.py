"""
Reading pace and completion estimates.

Every step returns None when its input is missing, so the chain

    page entries -> pace -> days to finish -> completion date

stops at the first gap instead of raising.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from datetime import date, timedelta, tzinfo
from enum import Enum

from shelfmark.analytics.dates import as_aware, elapsed
from shelfmark.models import ProgressLogEntry, ReadStatus, TrackedBook


class PaceWindow(str, Enum):
    """Which two progress entries a pace is measured between."""

    RECENT = "recent"  # two most recent page-bearing entries
    SPAN = "span"  # oldest and newest page-bearing entries


def page_entries(
    entries: Iterable[ProgressLogEntry], identifier: str, tz: tzinfo | None = None
) -> list[ProgressLogEntry]:
    """Entries for one book that carry a page number, oldest first."""
    return sorted(
        (e for e in entries if e.book_identifier == identifier and e.page is not None),
        key=lambda e: as_aware(e.timestamp, tz),
    )


def pace_between(
    older: ProgressLogEntry, newer: ProgressLogEntry, tz: tzinfo | None = None
) -> float | None:
    """Pages per day between two entries.

    Same-day entries count as one day. None unless the page number went up.
    """
    if older.page is None or newer.page is None:
        return None
    delta = newer.page - older.page
    if delta <= 0:
        return None
    days = elapsed(older.timestamp, newer.timestamp, tz).days
    return delta / max(1, days)


def reading_pace(
    entries: Iterable[ProgressLogEntry],
    identifier: str,
    window: PaceWindow = PaceWindow.RECENT,
    tz: tzinfo | None = None,
) -> float | None:
    """Pages per day for one book, or None with fewer than two page entries."""
    logged = page_entries(entries, identifier, tz)
    if len(logged) < 2:
        return None
    if window is PaceWindow.RECENT:
        return pace_between(logged[-2], logged[-1], tz)
    return pace_between(logged[0], logged[-1], tz)


def days_to_finish(
    total_pages: int | None, current_page: int | None, pace: float | None
) -> int | None:
    """Whole days needed to read the remaining pages at ``pace``."""
    if pace is None or pace <= 0 or total_pages is None or current_page is None:
        return None
    remaining = total_pages - current_page
    if remaining <= 0:
        return None
    return math.ceil(remaining / pace)


def current_page_for(
    book: TrackedBook, entries: Iterable[ProgressLogEntry], tz: tzinfo | None = None
) -> int | None:
    """Book's stored page, else the latest logged one."""
    if book.current_page is not None:
        return book.current_page
    logged = page_entries(entries, book.identifier, tz)
    return logged[-1].page if logged else None


def estimated_completion_date(
    book: TrackedBook,
    entries: Iterable[ProgressLogEntry],
    today: date,
    window: PaceWindow = PaceWindow.RECENT,
    tz: tzinfo | None = None,
) -> date | None:
    """Day an in-progress book should be finished at its current pace."""
    if book.status is not ReadStatus.IN_PROGRESS or not book.page_count:
        return None
    entries = list(entries)
    days = days_to_finish(
        book.page_count,
        current_page_for(book, entries, tz),
        reading_pace(entries, book.identifier, window, tz),
    )
    if days is None:
        return None
    return today + timedelta(days=days)
