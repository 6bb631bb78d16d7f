"""
Timed reading sessions.

Ending a session produces up to three records for the caller to store: the
session itself, the book with its new page, and a progress entry so the
session counts toward streaks and goals. Without an end page the book is
returned unchanged and no entry is made.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, replace
from datetime import datetime, timedelta

from shelfmark.analytics.dates import elapsed
from shelfmark.exceptions import InvalidInputError
from shelfmark.models import ProgressLogEntry, ReadingSession, TrackedBook

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionResult:
    """Records produced by ending a session.

    Attributes:
        session: Session to persist
        book: Book with the end page applied (unchanged without one)
        entry: Progress entry for streaks, or None without an end page
    """

    session: ReadingSession
    book: TrackedBook
    entry: ProgressLogEntry | None = None


def session_pages_read(start_page: int | None, end_page: int | None) -> int | None:
    """Pages covered by a session.

    With both pages this is the positive difference. Without a start page the
    end page itself counts, as when reading from the first page.
    """
    if end_page is None:
        return None
    if start_page is not None:
        diff = end_page - start_page
        return diff if diff > 0 else None
    return end_page if end_page > 0 else None


def end_session(
    book: TrackedBook,
    start_time: datetime,
    end_time: datetime,
    end_page: int | None = None,
    duration: timedelta | None = None,
) -> SessionResult:
    """Close a reading session on ``book``.

    Args:
        book: Book as it was when the session started
        start_time: When the session started
        end_time: When the session ended
        end_page: Page reached, if the reader entered one
        duration: Time spent reading, excluding pauses (default: the whole span)

    Raises:
        InvalidInputError: Session ends before it starts, negative duration or
            negative end page.
    """
    span = elapsed(start_time, end_time)
    if span < timedelta(0):
        raise InvalidInputError("Session ends before it starts", value=book.identifier)
    if duration is None:
        duration = span
    elif duration < timedelta(0):
        raise InvalidInputError("Session duration must not be negative", value=book.identifier)
    if end_page is not None and end_page < 0:
        raise InvalidInputError(f"Invalid end page: {end_page}", value=book.identifier)

    session = ReadingSession(
        book_identifier=book.identifier,
        start_time=start_time,
        end_time=end_time,
        duration=duration,
        pages_read=session_pages_read(book.current_page, end_page),
        start_page=book.current_page,
        end_page=end_page,
    )
    logger.debug(
        "Session on %s: %s, %s pages",
        book.identifier,
        session.formatted_duration,
        session.pages_read,
    )
    if end_page is None:
        return SessionResult(session=session, book=book)

    updated = replace(
        book,
        current_page=end_page,
        progress_percentage=(
            min(1.0, end_page / book.page_count) if book.page_count else book.progress_percentage
        ),
    )
    entry = ProgressLogEntry(book_identifier=book.identifier, timestamp=end_time, page=end_page)
    return SessionResult(session=session, book=updated, entry=entry)


def total_reading_time(
    sessions: Iterable[ReadingSession], identifier: str | None = None
) -> timedelta:
    """Summed session durations, for one book or the whole library."""
    return sum(
        (s.duration for s in sessions if identifier is None or s.book_identifier == identifier),
        timedelta(0),
    )


def average_pages_per_hour(sessions: Iterable[ReadingSession]) -> float | None:
    """Pages per hour over every session that recorded pages read."""
    timed = [s for s in sessions if s.pages_per_hour is not None]
    if not timed:
        return None
    pages = sum(s.pages_read or 0 for s in timed)
    hours = sum(s.duration.total_seconds() for s in timed) / 3600
    return pages / hours
