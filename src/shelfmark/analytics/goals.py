"""
Page goals, the yearly challenge and weekly activity.

Pages read in a period are counted per book from page-bearing entries: the
last page logged in the period minus a baseline, where the baseline is the
last page logged before the period (or the first page logged inside it).
Books whose page number went down contribute nothing.
"""

from __future__ import annotations

import math
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, tzinfo

from shelfmark.analytics.dates import as_aware, days_back, local_day, week_start
from shelfmark.models import (
    ProgressLogEntry,
    ReadingChallenge,
    ReadingGoal,
    ReadStatus,
    TrackedBook,
)

DAYS_PER_YEAR = 365
WEEK_DAYS = 7


@dataclass(frozen=True)
class GoalProgress:
    """Pages read against a page goal."""

    pages_read: int
    goal: int

    @property
    def reached(self) -> bool:
        return self.pages_read >= self.goal

    @property
    def fraction(self) -> float:
        if self.goal <= 0:
            return 1.0
        return min(1.0, self.pages_read / self.goal)


@dataclass(frozen=True)
class ChallengeProgress:
    """Books completed this year against a linear yearly schedule.

    ``ahead_by`` is positive when ahead of schedule, negative when behind.
    """

    year: int
    goal: int
    books_read: int
    expected: int
    ahead_by: int

    @property
    def on_track(self) -> bool:
        return self.ahead_by >= 0

    @property
    def fraction(self) -> float:
        if self.goal <= 0:
            return 1.0
        return min(1.0, self.books_read / self.goal)


@dataclass(frozen=True)
class DayActivity:
    day: date
    pages: int


def pages_read_in_period(
    entries: Iterable[ProgressLogEntry],
    start: date,
    end: date,
    tz: tzinfo | None = None,
) -> int:
    """Pages read between ``start`` and ``end`` (inclusive local days)."""
    by_book: dict[str, list[tuple[date, ProgressLogEntry]]] = defaultdict(list)
    for entry in entries:
        if entry.page is not None:
            by_book[entry.book_identifier].append((local_day(entry.timestamp, tz), entry))

    total = 0
    for logged in by_book.values():
        logged.sort(key=lambda pair: as_aware(pair[1].timestamp, tz))
        inside = [e for day, e in logged if start <= day <= end]
        if not inside:
            continue
        before = [e for day, e in logged if day < start]

        first_page = inside[0].page or 0
        last_page = inside[-1].page or 0
        baseline = before[-1].page if before else None
        start_page = min(first_page, baseline) if baseline is not None else first_page

        diff = last_page - start_page
        if diff > 0:
            total += diff
    return total


def daily_goal_progress(
    entries: Iterable[ProgressLogEntry],
    goal: ReadingGoal | None,
    today: date,
    tz: tzinfo | None = None,
) -> GoalProgress | None:
    if goal is None or goal.daily_page_goal is None:
        return None
    return GoalProgress(pages_read_in_period(entries, today, today, tz), goal.daily_page_goal)


def weekly_goal_progress(
    entries: Iterable[ProgressLogEntry],
    goal: ReadingGoal | None,
    today: date,
    tz: tzinfo | None = None,
) -> GoalProgress | None:
    """Progress for the ISO week (Monday start) up to and including today."""
    if goal is None or goal.weekly_page_goal is None:
        return None
    pages = pages_read_in_period(entries, week_start(today), today, tz)
    return GoalProgress(pages, goal.weekly_page_goal)


def books_finished_in_year(
    books: Iterable[TrackedBook], year: int, tz: tzinfo | None = None
) -> list[TrackedBook]:
    return [
        b
        for b in books
        if b.status is ReadStatus.COMPLETED
        and b.date_finished is not None
        and local_day(b.date_finished, tz).year == year
    ]


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def challenge_progress(
    books: Iterable[TrackedBook],
    challenge: ReadingChallenge | None,
    today: date,
    tz: tzinfo | None = None,
) -> ChallengeProgress | None:
    """Where the user stands against ``challenge`` on ``today``.

    The schedule is linear over a 365-day year. Past years expect the full
    goal, future years expect nothing.
    """
    if challenge is None:
        return None

    if challenge.year < today.year:
        expected = challenge.goal_count
    elif challenge.year > today.year:
        expected = 0
    else:
        day_of_year = today.timetuple().tm_yday
        expected = _round_half_up(challenge.goal_count * day_of_year / DAYS_PER_YEAR)

    books_read = len(books_finished_in_year(books, challenge.year, tz))
    return ChallengeProgress(
        year=challenge.year,
        goal=challenge.goal_count,
        books_read=books_read,
        expected=expected,
        ahead_by=books_read - expected,
    )


def weekly_activity(
    entries: Iterable[ProgressLogEntry], today: date, tz: tzinfo | None = None
) -> list[DayActivity]:
    """Pages read on each of the last seven days, oldest first."""
    entries = list(entries)
    return [
        DayActivity(day, pages_read_in_period(entries, day, day, tz))
        for day in days_back(today, WEEK_DAYS)
    ]
