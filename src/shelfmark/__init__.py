"""shelfmark: book metadata lookup and reading analytics.

Resolve a title, author or ISBN against Google Books and Open Library, and
derive streaks, goals, pace and challenge status from a reading log.
"""

from __future__ import annotations

__version__ = "0.1.0"

from shelfmark.exceptions import (
    BookNotFoundError,
    ConfigurationError,
    InvalidInputError,
    ShelfmarkError,
    SnapshotError,
    SourceError,
    SourceUnavailableError,
)
from shelfmark.identifiers import normalize_identifier
from shelfmark.models import (
    CandidateBook,
    LibrarySnapshot,
    ProgressLogEntry,
    ReadingChallenge,
    ReadingGoal,
    ReadStatus,
    StreakFreeze,
    TrackedBook,
)

__all__ = [
    "__version__",
    "BookNotFoundError",
    "CandidateBook",
    "ConfigurationError",
    "InvalidInputError",
    "LibrarySnapshot",
    "ProgressLogEntry",
    "ReadStatus",
    "ReadingChallenge",
    "ReadingGoal",
    "ShelfmarkError",
    "SnapshotError",
    "SourceError",
    "SourceUnavailableError",
    "StreakFreeze",
    "TrackedBook",
    "normalize_identifier",
]
