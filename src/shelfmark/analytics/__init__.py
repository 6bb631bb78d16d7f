"""Reading analytics: streaks, pace, goals, the challenge, sessions and notes.

All calculators are pure functions over records supplied by the caller.
"""

from shelfmark.analytics.engine import AnalyticsEngine, BookPace, DerivedAnalytics
from shelfmark.analytics.goals import ChallengeProgress, DayActivity, GoalProgress
from shelfmark.analytics.lifecycle import TransitionResult
from shelfmark.analytics.pace import PaceWindow
from shelfmark.analytics.sessions import SessionResult
from shelfmark.analytics.stats import LifetimeStats
from shelfmark.analytics.streaks import FreezePolicy

__all__ = [
    "AnalyticsEngine",
    "BookPace",
    "ChallengeProgress",
    "DayActivity",
    "DerivedAnalytics",
    "FreezePolicy",
    "GoalProgress",
    "LifetimeStats",
    "PaceWindow",
    "SessionResult",
    "TransitionResult",
]
