"""
Reading streaks and streak freezes.

A streak is a run of consecutive calendar days with at least one progress
entry. A missed day can be covered by a freeze: either one already recorded
for that day, or (when an allowance is configured) one spent on the fly while
counting. How often a freeze may be spent depends on FreezePolicy:

- CALENDAR_WEEK: at most ``freezes_per_week`` per ISO week (Monday start)
- ROLLING_WEEK: fewer than ``freezes_per_week`` other freezes within 7 days
  either side, so with one per week no two freezes are less than 7 days apart

Freeze days keep a streak alive but never add to it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date, tzinfo
from enum import Enum
from typing import assert_never

from shelfmark.analytics.dates import ONE_DAY, local_day
from shelfmark.models import ProgressLogEntry, StreakFreeze

logger = logging.getLogger(__name__)

ROLLING_WINDOW_DAYS = 7


class FreezePolicy(str, Enum):
    """Window within which the weekly freeze allowance applies."""

    CALENDAR_WEEK = "calendar_week"
    ROLLING_WEEK = "rolling_week"


def activity_days(entries: Iterable[ProgressLogEntry], tz: tzinfo | None = None) -> set[date]:
    """Local calendar days with at least one progress entry."""
    return {local_day(e.timestamp, tz) for e in entries}


def has_activity_on(days: Iterable[date], day: date) -> bool:
    return day in set(days)


def _iso_week(day: date) -> tuple[int, int]:
    iso = day.isocalendar()
    return iso[0], iso[1]


def _freeze_allowed(
    used: Iterable[date], day: date, policy: FreezePolicy, freezes_per_week: int
) -> bool:
    """True if one more freeze may be spent on ``day``."""
    if freezes_per_week <= 0:
        return False

    if policy is FreezePolicy.CALENDAR_WEEK:
        week = _iso_week(day)
        spent = sum(1 for d in used if _iso_week(d) == week)
    elif policy is FreezePolicy.ROLLING_WEEK:
        spent = sum(1 for d in used if abs((d - day).days) < ROLLING_WINDOW_DAYS)
    else:
        assert_never(policy)

    return spent < freezes_per_week


def freeze_available(
    freezes: Iterable[StreakFreeze],
    today: date,
    policy: FreezePolicy = FreezePolicy.CALENDAR_WEEK,
    freezes_per_week: int = 1,
) -> bool:
    """True if the allowance covering ``today`` still has a freeze left."""
    return _freeze_allowed((f.date_used for f in freezes), today, policy, freezes_per_week)


def use_freeze(
    freezes: Iterable[StreakFreeze],
    day: date,
    policy: FreezePolicy = FreezePolicy.CALENDAR_WEEK,
    freezes_per_week: int = 1,
) -> StreakFreeze | None:
    """Spend a freeze on ``day``.

    Returns:
        A new StreakFreeze for the caller to persist, or None if ``day`` is
        already frozen or the allowance is spent.
    """
    used = [f.date_used for f in freezes]
    if day in used:
        logger.debug("Freeze already recorded for %s", day)
        return None
    if not _freeze_allowed(used, day, policy, freezes_per_week):
        logger.info("No streak freeze left for %s (%s)", day, policy.value)
        return None
    return StreakFreeze(date_used=day)


def current_streak(
    activity: Iterable[date],
    today: date,
    freeze_days: Iterable[date] = (),
    *,
    policy: FreezePolicy = FreezePolicy.CALENDAR_WEEK,
    freezes_per_week: int = 0,
) -> int:
    """Consecutive active days ending today (or yesterday).

    Today without activity does not break the streak: the count starts from
    yesterday instead. Walking backwards, active days add one, frozen days are
    skipped, and any other day ends the walk unless ``freezes_per_week`` allows
    spending a freeze on it.

    Args:
        activity: Days with reading activity
        today: Caller's current local day
        freeze_days: Days covered by recorded freezes
        policy: Window for the on-the-fly allowance
        freezes_per_week: On-the-fly allowance (0 uses recorded freezes only)
    """
    days = set(activity)
    if not days:
        return 0
    frozen = set(freeze_days)
    spent = sorted(frozen)
    earliest = min(days)

    day = today
    if day not in days and day not in frozen:
        day -= ONE_DAY

    streak = 0
    while day >= earliest:
        if day in days:
            streak += 1
        elif day in frozen:
            pass
        elif _freeze_allowed(spent, day, policy, freezes_per_week):
            logger.debug("Spending freeze on %s", day)
            spent.append(day)
        else:
            break
        day -= ONE_DAY
    return streak


def longest_streak(activity: Iterable[date]) -> int:
    """Longest run of consecutive active days ever."""
    ordered = sorted(set(activity))
    if not ordered:
        return 0

    longest = current = 1
    for previous, day in zip(ordered, ordered[1:]):
        if (day - previous).days == 1:
            current += 1
            longest = max(longest, current)
        else:
            current = 1
    return longest
