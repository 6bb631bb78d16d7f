"""Pydantic schemas for library snapshot files (YAML or JSON).

Example file:

    books:
      - identifier: "978-0-06-231611-0"
        title: "The Martian"
        authors: ["Andy Weir"]
        page_count: 387
        status: in_progress
        date_started: 2026-03-01T20:00:00
    entries:
      - book_identifier: "9780062316110"
        timestamp: 2026-03-01T21:00:00
        page: 45
    freezes:
      - date_used: 2026-02-20
    goal:
      daily_page_goal: 30
    challenges:
      - year: 2026
        goal_count: 24
    notes:
      - isbn: "9780062316110"
        type: quote
        text: "I guess you could call it a failure, but I prefer learning experience."
        page_number: 28
    sessions:
      - isbn: "9780062316110"
        start_time: 2026-03-01T20:15:00
        end_time: 2026-03-01T21:00:00
        start_page: 20
        end_page: 45
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from shelfmark.analytics.dates import elapsed
from shelfmark.analytics.sessions import session_pages_read
from shelfmark.identifiers import normalize_identifier
from shelfmark.models import (
    BookNote,
    LibrarySnapshot,
    NoteType,
    ProgressLogEntry,
    ReadingChallenge,
    ReadingGoal,
    ReadingSession,
    ReadStatus,
    StreakFreeze,
    TrackedBook,
)


class BookRecord(BaseModel):
    """One tracked book."""

    identifier: str = Field(alias="isbn")
    title: str
    authors: list[str] = Field(default_factory=list)
    page_count: int | None = Field(default=None, ge=0)
    status: ReadStatus = ReadStatus.NOT_STARTED
    rating: int | None = Field(default=None, ge=1, le=5)
    date_started: datetime | None = None
    date_finished: datetime | None = None
    current_page: int | None = Field(default=None, ge=0)
    progress_percentage: float | None = Field(default=None, ge=0.0, le=1.0)
    date_added: datetime | None = None
    publisher: str | None = None
    published_date: str | None = None
    description: str | None = None

    model_config = {"extra": "ignore", "populate_by_name": True}

    @field_validator("identifier", mode="before")
    @classmethod
    def normalize(cls, v: Any) -> str:
        normalized = normalize_identifier(str(v))
        if not normalized:
            raise ValueError("identifier must contain letters or digits")
        return normalized

    def to_model(self) -> TrackedBook:
        return TrackedBook(
            identifier=self.identifier,
            title=self.title,
            authors=tuple(self.authors),
            page_count=self.page_count,
            status=self.status,
            rating=self.rating,
            date_started=self.date_started,
            date_finished=self.date_finished,
            current_page=self.current_page,
            progress_percentage=self.progress_percentage,
            date_added=self.date_added,
            publisher=self.publisher,
            published_date=self.published_date,
            description=self.description,
        )


class ProgressEntryRecord(BaseModel):
    """One progress log entry. Needs a page, a percentage, or both."""

    book_identifier: str = Field(alias="isbn")
    timestamp: datetime
    page: int | None = Field(default=None, ge=0)
    percentage: float | None = Field(default=None, ge=0.0, le=1.0)

    model_config = {"extra": "ignore", "populate_by_name": True}

    @field_validator("book_identifier", mode="before")
    @classmethod
    def normalize(cls, v: Any) -> str:
        return normalize_identifier(str(v))

    @model_validator(mode="after")
    def page_or_percentage(self) -> ProgressEntryRecord:
        if self.page is None and self.percentage is None:
            raise ValueError("entry needs a page or a percentage")
        return self

    def to_model(self) -> ProgressLogEntry:
        return ProgressLogEntry(
            book_identifier=self.book_identifier,
            timestamp=self.timestamp,
            page=self.page,
            percentage=self.percentage,
        )


class FreezeRecord(BaseModel):
    date_used: date

    model_config = {"extra": "ignore"}


class GoalRecord(BaseModel):
    daily_page_goal: int | None = Field(default=None, ge=1)
    weekly_page_goal: int | None = Field(default=None, ge=1)

    model_config = {"extra": "ignore"}


class ChallengeRecord(BaseModel):
    year: int = Field(ge=1)
    goal_count: int = Field(ge=1)

    model_config = {"extra": "ignore"}


class NoteRecord(BaseModel):
    """One quote or note."""

    book_identifier: str = Field(alias="isbn")
    text: str = Field(min_length=1)
    note_type: NoteType = Field(default=NoteType.NOTE, alias="type")
    page_number: int | None = Field(default=None, ge=1)
    date_created: datetime | None = None

    model_config = {"extra": "ignore", "populate_by_name": True}

    @field_validator("book_identifier", mode="before")
    @classmethod
    def normalize(cls, v: Any) -> str:
        return normalize_identifier(str(v))

    @field_validator("text")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("text must not be blank")
        return v.strip()

    def to_model(self) -> BookNote:
        return BookNote(
            book_identifier=self.book_identifier,
            text=self.text,
            note_type=self.note_type,
            page_number=self.page_number,
            date_created=self.date_created,
        )


class SessionRecord(BaseModel):
    """One timed reading session. ``duration`` defaults to the whole span."""

    book_identifier: str = Field(alias="isbn")
    start_time: datetime
    end_time: datetime
    duration: timedelta | None = None
    pages_read: int | None = Field(default=None, ge=0)
    start_page: int | None = Field(default=None, ge=0)
    end_page: int | None = Field(default=None, ge=0)

    model_config = {"extra": "ignore", "populate_by_name": True}

    @field_validator("book_identifier", mode="before")
    @classmethod
    def normalize(cls, v: Any) -> str:
        return normalize_identifier(str(v))

    @model_validator(mode="after")
    def ordered(self) -> SessionRecord:
        if elapsed(self.start_time, self.end_time) < timedelta(0):
            raise ValueError("end_time is before start_time")
        if self.duration is not None and self.duration < timedelta(0):
            raise ValueError("duration must not be negative")
        return self

    def to_model(self) -> ReadingSession:
        pages_read = self.pages_read
        if pages_read is None:
            pages_read = session_pages_read(self.start_page, self.end_page)
        return ReadingSession(
            book_identifier=self.book_identifier,
            start_time=self.start_time,
            end_time=self.end_time,
            duration=(
                self.duration
                if self.duration is not None
                else elapsed(self.start_time, self.end_time)
            ),
            pages_read=pages_read,
            start_page=self.start_page,
            end_page=self.end_page,
        )


class SnapshotFile(BaseModel):
    """Top-level snapshot document."""

    books: list[BookRecord] = Field(default_factory=list)
    entries: list[ProgressEntryRecord] = Field(default_factory=list)
    freezes: list[FreezeRecord] = Field(default_factory=list)
    goal: GoalRecord | None = None
    challenges: list[ChallengeRecord] = Field(default_factory=list)
    notes: list[NoteRecord] = Field(default_factory=list)
    sessions: list[SessionRecord] = Field(default_factory=list)

    model_config = {"extra": "ignore"}

    @field_validator(
        "books", "entries", "freezes", "challenges", "notes", "sessions", mode="before"
    )
    @classmethod
    def none_as_empty(cls, v: Any) -> Any:
        return [] if v is None else v

    def to_snapshot(self) -> LibrarySnapshot:
        return LibrarySnapshot(
            books=tuple(b.to_model() for b in self.books),
            entries=tuple(e.to_model() for e in self.entries),
            freezes=tuple(StreakFreeze(f.date_used) for f in self.freezes),
            goal=(
                ReadingGoal(self.goal.daily_page_goal, self.goal.weekly_page_goal)
                if self.goal is not None
                else None
            ),
            challenges=tuple(ReadingChallenge(c.year, c.goal_count) for c in self.challenges),
            notes=tuple(n.to_model() for n in self.notes),
            sessions=tuple(s.to_model() for s in self.sessions),
        )


def validate_snapshot(data: dict[str, Any]) -> SnapshotFile:
    """
    Validate snapshot file data.

    Raises:
        pydantic.ValidationError: If validation fails
    """
    return SnapshotFile.model_validate(data)
