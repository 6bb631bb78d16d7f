"""Domain models shared by the resolver and the analytics engine.

CandidateBook is produced by catalog sources and lives for one resolution
call. TrackedBook, ProgressLogEntry, StreakFreeze, ReadingGoal,
ReadingChallenge, BookNote and ReadingSession mirror records owned by the
caller's persistence layer; shelfmark only reads them and hands back new
values to store.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum

from shelfmark.exceptions import InvalidInputError


class ReadStatus(str, Enum):
    """Reading status of a tracked book."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ").title()


@dataclass(frozen=True)
class CandidateBook:
    """Unpersisted book record returned by a catalog search."""

    identifier: str
    title: str
    authors: tuple[str, ...] = ()
    publisher: str | None = None
    published_date: str | None = None
    page_count: int | None = None
    description: str | None = None
    cover_url: str | None = None
    source: str | None = None

    @property
    def authors_display(self) -> str:
        return ", ".join(self.authors) if self.authors else "Unknown Author"

    def to_tracked_book(self, *, added: datetime | None = None) -> TrackedBook:
        """Accept this candidate as a new, not-started tracked book."""
        return TrackedBook(
            identifier=self.identifier,
            title=self.title,
            authors=self.authors,
            publisher=self.publisher,
            published_date=self.published_date,
            page_count=self.page_count,
            description=self.description,
            date_added=added or datetime.now(),
        )


@dataclass(frozen=True)
class TrackedBook:
    """A book on the user's shelf.

    rating is only meaningful for completed books, and the progress fields only
    for in-progress or completed ones; use effective_rating and
    effective_progress when reading them.
    """

    identifier: str
    title: str
    authors: tuple[str, ...] = ()
    page_count: int | None = None
    status: ReadStatus = ReadStatus.NOT_STARTED
    rating: int | None = None
    date_started: datetime | None = None
    date_finished: datetime | None = None
    current_page: int | None = None
    progress_percentage: float | None = None
    date_added: datetime | None = None
    publisher: str | None = None
    published_date: str | None = None
    description: str | None = None

    @property
    def effective_rating(self) -> int | None:
        return self.rating if self.status is ReadStatus.COMPLETED else None

    @property
    def effective_progress(self) -> float | None:
        """Progress in [0, 1], preferring pages over the stored percentage."""
        if self.status is ReadStatus.NOT_STARTED:
            return None
        if self.current_page is not None and self.page_count:
            return min(1.0, max(0.0, self.current_page / self.page_count))
        if self.progress_percentage is not None:
            return min(1.0, max(0.0, self.progress_percentage))
        return None

    @property
    def days_to_read(self) -> int | None:
        """Whole days between start and finish, if both are known."""
        from shelfmark.analytics.dates import elapsed

        if self.date_started is None or self.date_finished is None:
            return None
        days = elapsed(self.date_started, self.date_finished).days
        return days if days >= 0 else None


@dataclass(frozen=True)
class ProgressLogEntry:
    """One progress update for a book. Has a page, a percentage, or both."""

    book_identifier: str
    timestamp: datetime
    page: int | None = None
    percentage: float | None = None

    def __post_init__(self) -> None:
        if self.page is None and self.percentage is None:
            raise InvalidInputError(
                "Progress entry needs a page or a percentage", value=self.book_identifier
            )

    def pages_read_since(self, previous: ProgressLogEntry | None) -> int | None:
        """Positive page delta from ``previous``, or None."""
        if self.page is None:
            return None
        if previous is None or previous.page is None:
            return self.page if self.page > 0 else None
        diff = self.page - previous.page
        return diff if diff > 0 else None


@dataclass(frozen=True)
class StreakFreeze:
    """A streak freeze spent on ``date_used``."""

    date_used: date

    @property
    def week_of_year(self) -> int:
        return self.date_used.isocalendar()[1]

    @property
    def year(self) -> int:
        return self.date_used.isocalendar()[0]


class NoteType(str, Enum):
    """Kind of a book note: a passage copied from the book, or the reader's own words."""

    QUOTE = "quote"
    NOTE = "note"

    @property
    def display_name(self) -> str:
        return self.value.title()


@dataclass(frozen=True)
class BookNote:
    """A quote or note attached to one book."""

    book_identifier: str
    text: str
    note_type: NoteType = NoteType.NOTE
    page_number: int | None = None
    date_created: datetime | None = None

    def __post_init__(self) -> None:
        if not self.text.strip():
            raise InvalidInputError("Note text must not be empty", value=self.book_identifier)


@dataclass(frozen=True)
class ReadingSession:
    """One timed reading session.

    ``duration`` is time actually spent reading, so it can be shorter than
    ``end_time - start_time`` when the session was paused.
    """

    book_identifier: str
    start_time: datetime
    end_time: datetime
    duration: timedelta
    pages_read: int | None = None
    start_page: int | None = None
    end_page: int | None = None

    @property
    def pages_per_hour(self) -> float | None:
        seconds = self.duration.total_seconds()
        if self.pages_read is None or self.pages_read <= 0 or seconds <= 0:
            return None
        return self.pages_read / (seconds / 3600)

    @property
    def formatted_duration(self) -> str:
        """``H:MM:SS`` for an hour or more, else ``M:SS``."""
        total = int(self.duration.total_seconds())
        hours, rest = divmod(total, 3600)
        minutes, seconds = divmod(rest, 60)
        if hours:
            return f"{hours}:{minutes:02d}:{seconds:02d}"
        return f"{minutes}:{seconds:02d}"


@dataclass(frozen=True)
class ReadingGoal:
    """Daily and weekly page goals. Either may be unset."""

    daily_page_goal: int | None = None
    weekly_page_goal: int | None = None


@dataclass(frozen=True)
class ReadingChallenge:
    """Yearly target for number of books completed."""

    year: int
    goal_count: int


@dataclass(frozen=True)
class LibrarySnapshot:
    """Consistent, read-only view of the caller's records."""

    books: tuple[TrackedBook, ...] = ()
    entries: tuple[ProgressLogEntry, ...] = ()
    freezes: tuple[StreakFreeze, ...] = ()
    goal: ReadingGoal | None = None
    challenges: tuple[ReadingChallenge, ...] = field(default_factory=tuple)
    notes: tuple[BookNote, ...] = ()
    sessions: tuple[ReadingSession, ...] = ()

    def challenge_for(self, year: int) -> ReadingChallenge | None:
        return next((c for c in self.challenges if c.year == year), None)

    def book(self, identifier: str) -> TrackedBook | None:
        return next((b for b in self.books if b.identifier == identifier), None)
