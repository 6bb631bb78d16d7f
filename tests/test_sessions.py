"""Tests for timed reading sessions."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from shelfmark.analytics.sessions import (
    average_pages_per_hour,
    end_session,
    session_pages_read,
    total_reading_time,
)
from shelfmark.exceptions import InvalidInputError
from shelfmark.models import ReadingSession, ReadStatus
from tests.conftest import make_book

START = datetime(2026, 3, 12, 20, 0)
END = datetime(2026, 3, 12, 20, 45)


def make_session(
    minutes: float, pages: int | None, identifier: str = "9780000000001"
) -> ReadingSession:
    return ReadingSession(
        book_identifier=identifier,
        start_time=START,
        end_time=START + timedelta(minutes=minutes),
        duration=timedelta(minutes=minutes),
        pages_read=pages,
    )


class TestReadingSession:
    def test_pages_per_hour(self) -> None:
        assert make_session(30, 20).pages_per_hour == 40

    @pytest.mark.parametrize(("minutes", "pages"), [(30, None), (30, 0), (0, 20)])
    def test_pages_per_hour_needs_pages_and_time(self, minutes, pages) -> None:
        assert make_session(minutes, pages).pages_per_hour is None

    @pytest.mark.parametrize(
        ("seconds", "expected"),
        [(59, "0:59"), (45 * 60, "45:00"), (3600 + 5 * 60 + 9, "1:05:09")],
    )
    def test_formatted_duration(self, seconds: int, expected: str) -> None:
        session = ReadingSession("x", START, START, timedelta(seconds=seconds))
        assert session.formatted_duration == expected


class TestSessionPagesRead:
    @pytest.mark.parametrize(
        ("start", "end", "expected"),
        [
            (100, 130, 30),
            (100, 100, None),
            (100, 90, None),
            (None, 25, 25),
            (None, 0, None),
            (100, None, None),
        ],
    )
    def test_pages(self, start, end, expected) -> None:
        assert session_pages_read(start, end) == expected


class TestEndSession:
    def test_with_end_page(self) -> None:
        book = make_book(status=ReadStatus.IN_PROGRESS, page_count=300, current_page=100)

        result = end_session(book, START, END, end_page=130)

        assert result.session.pages_read == 30
        assert result.session.start_page == 100
        assert result.session.end_page == 130
        assert result.session.duration == timedelta(minutes=45)
        assert result.session.pages_per_hour == 40
        assert result.book.current_page == 130
        assert result.book.progress_percentage == pytest.approx(130 / 300)
        assert result.entry is not None
        assert result.entry.page == 130
        assert result.entry.timestamp == END
        assert result.entry.book_identifier == book.identifier

    def test_without_end_page(self) -> None:
        book = make_book(status=ReadStatus.IN_PROGRESS, current_page=100)

        result = end_session(book, START, END)

        assert result.session.pages_read is None
        assert result.book is book
        assert result.entry is None

    def test_paused_duration(self) -> None:
        result = end_session(make_book(), START, END, end_page=10, duration=timedelta(minutes=30))
        assert result.session.duration == timedelta(minutes=30)
        assert result.session.pages_per_hour == 20

    def test_progress_capped_at_one(self) -> None:
        book = make_book(page_count=100, current_page=90)
        assert end_session(book, START, END, end_page=120).book.progress_percentage == 1.0

    def test_mixed_timestamps(self) -> None:
        aware_end = datetime(2026, 3, 13, 20, 45, tzinfo=timezone.utc)
        result = end_session(make_book(), START, aware_end, end_page=10)
        assert result.session.duration > timedelta(0)

    @pytest.mark.parametrize(
        ("start", "end", "kwargs", "message"),
        [
            (END, START, {}, "before it starts"),
            (START, END, {"duration": timedelta(minutes=-1)}, "negative"),
            (START, END, {"end_page": -5}, "end page"),
        ],
    )
    def test_invalid(self, start, end, kwargs, message) -> None:
        with pytest.raises(InvalidInputError, match=message):
            end_session(make_book(), start, end, **kwargs)


class TestTotals:
    def test_total_reading_time(self) -> None:
        sessions = [make_session(30, 10), make_session(15, None), make_session(60, 50, "b")]
        assert total_reading_time(sessions) == timedelta(minutes=105)
        assert total_reading_time(sessions, "b") == timedelta(minutes=60)
        assert total_reading_time([]) == timedelta(0)

    def test_average_pages_per_hour(self) -> None:
        sessions = [make_session(30, 10), make_session(15, None), make_session(60, 50)]
        # the session without pages is left out: 60 pages over 1.5 hours
        assert average_pages_per_hour(sessions) == pytest.approx(40)
        assert average_pages_per_hour([make_session(15, None)]) is None
