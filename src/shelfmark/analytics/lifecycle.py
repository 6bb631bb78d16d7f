"""
Read-status transitions and progress updates.

Every function returns new values; nothing here mutates a TrackedBook. Side
effects per target status:

    in_progress: start date set if missing, finish date cleared
    completed:   start and finish dates set if missing, progress filled to 100%
    not_started: dates and progress cleared, stored progress entries discarded

The rating survives only a transition to completed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import assert_never

from shelfmark.exceptions import InvalidInputError
from shelfmark.models import ProgressLogEntry, ReadStatus, TrackedBook

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


@dataclass(frozen=True)
class TransitionResult:
    """Outcome of a status change.

    Attributes:
        book: Updated book to persist
        discard_progress: Caller should delete the book's progress entries
    """

    book: TrackedBook
    discard_progress: bool = False


def next_status(status: ReadStatus) -> ReadStatus:
    """Toggle cycle: not started -> in progress -> completed -> not started."""
    if status is ReadStatus.NOT_STARTED:
        return ReadStatus.IN_PROGRESS
    if status is ReadStatus.IN_PROGRESS:
        return ReadStatus.COMPLETED
    if status is ReadStatus.COMPLETED:
        return ReadStatus.NOT_STARTED
    assert_never(status)


def transition(
    book: TrackedBook, status: ReadStatus, now: datetime | None = None
) -> TransitionResult:
    """Move ``book`` to ``status`` with that status's side effects."""
    now = now or datetime.now()

    if status is ReadStatus.IN_PROGRESS:
        updated = replace(
            book,
            status=status,
            date_started=book.date_started or now,
            date_finished=None,
            rating=None,
        )
        result = TransitionResult(updated)
    elif status is ReadStatus.COMPLETED:
        updated = replace(
            book,
            status=status,
            date_started=book.date_started or now,
            date_finished=book.date_finished or now,
            current_page=book.page_count if book.page_count else book.current_page,
            progress_percentage=1.0,
        )
        result = TransitionResult(updated)
    elif status is ReadStatus.NOT_STARTED:
        updated = replace(
            book,
            status=status,
            date_started=None,
            date_finished=None,
            current_page=None,
            progress_percentage=None,
            rating=None,
        )
        result = TransitionResult(updated, discard_progress=True)
    else:
        assert_never(status)

    logger.debug("'%s': %s -> %s", book.title, book.status.value, status.value)
    return result


def toggle_status(book: TrackedBook, now: datetime | None = None) -> TransitionResult:
    return transition(book, next_status(book.status), now)


def record_progress(
    book: TrackedBook,
    page: int | None = None,
    percentage: float | None = None,
    now: datetime | None = None,
) -> tuple[TrackedBook, ProgressLogEntry]:
    """Apply a progress update and build the log entry for it.

    A page wins over a percentage. Pages are clamped to ``[0, page_count]``
    and percentages to ``[0, 1]``. With a known page count the page also sets
    the percentage; a percentage-only update clears the stored page.

    Raises:
        InvalidInputError: Neither page nor percentage given.
    """
    if page is None and percentage is None:
        raise InvalidInputError("Progress needs a page or a percentage", value=book.identifier)
    now = now or datetime.now()

    clamped_pct = min(1.0, max(0.0, percentage)) if percentage is not None else None

    if page is not None:
        clamped_page = max(0, min(page, book.page_count) if book.page_count is not None else page)
        updated = replace(
            book,
            current_page=clamped_page,
            progress_percentage=(
                clamped_page / book.page_count if book.page_count else book.progress_percentage
            ),
        )
    else:
        clamped_page = None
        updated = replace(book, current_page=None, progress_percentage=clamped_pct)

    entry = ProgressLogEntry(
        book_identifier=book.identifier,
        timestamp=now,
        page=clamped_page,
        percentage=clamped_pct,
    )
    return updated, entry


def set_rating(book: TrackedBook, rating: int | None) -> TrackedBook:
    """Rate a completed book (clamped to 1..5). None clears the rating.

    Raises:
        InvalidInputError: Book is not completed.
    """
    if book.status is not ReadStatus.COMPLETED:
        raise InvalidInputError(
            f"Only completed books can be rated ('{book.title}' is {book.status.display_name})",
            value=book.identifier,
        )
    if rating is None:
        return replace(book, rating=None)
    return replace(book, rating=max(MIN_RATING, min(MAX_RATING, rating)))
