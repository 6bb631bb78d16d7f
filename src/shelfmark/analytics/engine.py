"""
Analytics engine.

Runs every calculator over one LibrarySnapshot and bundles the results. The
snapshot is never modified; call compute() again after each data change.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, tzinfo
from typing import TYPE_CHECKING

from shelfmark.analytics.dates import local_day
from shelfmark.analytics.goals import (
    ChallengeProgress,
    DayActivity,
    GoalProgress,
    challenge_progress,
    daily_goal_progress,
    weekly_activity,
    weekly_goal_progress,
)
from shelfmark.analytics.notes import quote_of_the_day
from shelfmark.analytics.pace import (
    PaceWindow,
    current_page_for,
    days_to_finish,
    estimated_completion_date,
    reading_pace,
)
from shelfmark.analytics.sessions import average_pages_per_hour, total_reading_time
from shelfmark.analytics.stats import LifetimeStats, lifetime_stats
from shelfmark.analytics.streaks import (
    FreezePolicy,
    activity_days,
    current_streak,
    freeze_available,
    longest_streak,
)
from shelfmark.models import BookNote, LibrarySnapshot, ReadStatus, TrackedBook

if TYPE_CHECKING:
    from shelfmark.config import AnalyticsSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BookPace:
    """Pace and finish estimate for one in-progress book."""

    identifier: str
    title: str
    pages_per_day: float | None
    days_remaining: int | None
    estimated_completion: date | None


@dataclass(frozen=True)
class DerivedAnalytics:
    """Everything computed from one snapshot. Never persisted."""

    today: date
    current_streak_days: int
    longest_streak_days: int
    has_read_today: bool
    freeze_available: bool
    daily_goal: GoalProgress | None
    weekly_goal: GoalProgress | None
    challenge: ChallengeProgress | None
    lifetime: LifetimeStats
    book_paces: tuple[BookPace, ...] = ()
    weekly_activity: tuple[DayActivity, ...] = field(default_factory=tuple)
    quote_of_the_day: BookNote | None = None
    total_reading_time: timedelta = timedelta(0)
    pages_per_hour: float | None = None

    @property
    def challenge_schedule_delta(self) -> int | None:
        return self.challenge.ahead_by if self.challenge is not None else None


class AnalyticsEngine:
    """Compute DerivedAnalytics for a snapshot.

    Args:
        settings: Freeze policy and pace window (defaults from the environment)
    """

    def __init__(self, settings: AnalyticsSettings | None = None) -> None:
        if settings is None:
            from shelfmark.config import AnalyticsSettings

            settings = AnalyticsSettings()
        self.settings = settings

    @property
    def freeze_policy(self) -> FreezePolicy:
        return self.settings.freeze_policy

    @property
    def pace_window(self) -> PaceWindow:
        return self.settings.pace_window

    def compute(
        self,
        snapshot: LibrarySnapshot,
        now: datetime | None = None,
        tz: tzinfo | None = None,
    ) -> DerivedAnalytics:
        """Derive streaks, goals, paces, challenge, session totals and lifetime stats.

        Args:
            snapshot: Books, entries, freezes, goal and challenges
            now: Current time (default: now in ``tz``)
            tz: Zone whose calendar days count (default: system local)
        """
        now = now or datetime.now(tz)
        today = local_day(now, tz)
        s = self.settings

        days = activity_days(snapshot.entries, tz)
        frozen = {f.date_used for f in snapshot.freezes}
        auto_allowance = s.freezes_per_week if s.auto_freeze else 0

        streak = current_streak(
            days,
            today,
            frozen,
            policy=s.freeze_policy,
            freezes_per_week=auto_allowance,
        )

        paces = tuple(
            self._book_pace(snapshot, book, today, tz)
            for book in snapshot.books
            if book.status is ReadStatus.IN_PROGRESS
        )

        result = DerivedAnalytics(
            today=today,
            current_streak_days=streak,
            longest_streak_days=longest_streak(days),
            has_read_today=today in days,
            freeze_available=freeze_available(
                snapshot.freezes, today, s.freeze_policy, s.freezes_per_week
            ),
            daily_goal=daily_goal_progress(snapshot.entries, snapshot.goal, today, tz),
            weekly_goal=weekly_goal_progress(snapshot.entries, snapshot.goal, today, tz),
            challenge=challenge_progress(
                snapshot.books, snapshot.challenge_for(today.year), today, tz
            ),
            lifetime=lifetime_stats(snapshot.books, len(days)),
            book_paces=paces,
            weekly_activity=tuple(weekly_activity(snapshot.entries, today, tz)),
            quote_of_the_day=quote_of_the_day(snapshot.notes, today),
            total_reading_time=total_reading_time(snapshot.sessions),
            pages_per_hour=average_pages_per_hour(snapshot.sessions),
        )
        logger.debug(
            "Analytics for %s: streak=%d longest=%d books=%d entries=%d",
            today,
            result.current_streak_days,
            result.longest_streak_days,
            len(snapshot.books),
            len(snapshot.entries),
        )
        return result

    def _book_pace(
        self, snapshot: LibrarySnapshot, book: TrackedBook, today: date, tz: tzinfo | None
    ) -> BookPace:
        pace = reading_pace(snapshot.entries, book.identifier, self.pace_window, tz)
        return BookPace(
            identifier=book.identifier,
            title=book.title,
            pages_per_day=pace,
            days_remaining=days_to_finish(
                book.page_count, current_page_for(book, snapshot.entries, tz), pace
            ),
            estimated_completion=estimated_completion_date(
                book, snapshot.entries, today, self.pace_window, tz
            ),
        )
