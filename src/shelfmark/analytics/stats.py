"""Lifetime reading statistics."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, tzinfo

from shelfmark.analytics.dates import local_day
from shelfmark.models import ReadStatus, TrackedBook


@dataclass(frozen=True)
class LifetimeStats:
    total_books_read: int
    total_pages_read: int
    average_rating: float | None
    average_days_per_book: float | None
    average_pages_per_day: float | None


def _mean(values: list[int]) -> float | None:
    return sum(values) / len(values) if values else None


def lifetime_stats(books: Iterable[TrackedBook], reading_days: int) -> LifetimeStats:
    """Totals over completed books.

    Args:
        books: All tracked books
        reading_days: Number of distinct days with reading activity
    """
    books = list(books)
    completed = [b for b in books if b.status is ReadStatus.COMPLETED]
    total_pages = sum(b.page_count for b in completed if b.page_count)

    return LifetimeStats(
        total_books_read=len(completed),
        total_pages_read=total_pages,
        average_rating=_mean([r for b in books if (r := b.effective_rating) is not None]),
        average_days_per_book=_mean([d for b in books if (d := b.days_to_read) is not None]),
        average_pages_per_day=total_pages / reading_days if reading_days > 0 else None,
    )


def books_finished_between(
    books: Iterable[TrackedBook], start: date, end: date, tz: tzinfo | None = None
) -> list[TrackedBook]:
    """Books whose finish day falls in ``start..end`` (inclusive)."""
    return [
        b
        for b in books
        if b.date_finished is not None and start <= local_day(b.date_finished, tz) <= end
    ]
