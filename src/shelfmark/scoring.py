"""Relevance scoring for catalog search results.

Weights are fixed:
- +10 per query word that is a whole word of the title
- +5 per query word that only appears inside the title text
- +8 per author word found in the candidate's joined author names
- +20 when every query word is a whole word of the title

Words are lowercased, split on whitespace, and must be at least 2 characters.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from shelfmark.models import CandidateBook

logger = logging.getLogger(__name__)

EXACT_WORD_POINTS = 10
PARTIAL_WORD_POINTS = 5
AUTHOR_WORD_POINTS = 8
FULL_TITLE_BONUS = 20
MIN_WORD_LENGTH = 2


def tokenize(text: str | None) -> set[str]:
    """Lowercase whitespace-separated words of at least MIN_WORD_LENGTH chars."""
    if not text:
        return set()
    return {w for w in text.lower().split() if len(w) >= MIN_WORD_LENGTH}


def score_candidate(candidate: CandidateBook, query: str, author: str | None = None) -> int:
    """Score one candidate against the query and optional author."""
    query_words = tokenize(query)
    author_words = tokenize(author)

    title_lower = candidate.title.lower()
    title_words = tokenize(candidate.title)

    score = 0
    for word in query_words:
        if word in title_words:
            score += EXACT_WORD_POINTS
        elif word in title_lower:
            score += PARTIAL_WORD_POINTS

    if author_words:
        joined_authors = " ".join(candidate.authors).lower()
        score += AUTHOR_WORD_POINTS * sum(1 for w in author_words if w in joined_authors)

    if query_words <= title_words:
        score += FULL_TITLE_BONUS

    return score


def score_candidates(
    candidates: Iterable[CandidateBook], query: str, author: str | None = None
) -> list[tuple[CandidateBook, int]]:
    """Pair every candidate with its score, preserving input order."""
    return [(c, score_candidate(c, query, author)) for c in candidates]


def rank_candidates(
    candidates: Sequence[CandidateBook], query: str, author: str | None = None
) -> list[CandidateBook]:
    """Sort candidates by descending score. Ties keep their input order."""
    scored = score_candidates(candidates, query, author)
    # sorted() is stable, so equal scores stay in insertion order
    ranked = sorted(scored, key=lambda pair: pair[1], reverse=True)

    if logger.isEnabledFor(logging.DEBUG):
        for position, (candidate, score) in enumerate(ranked[:3], start=1):
            logger.debug("Top %d: '%s' (score=%d)", position, candidate.title, score)

    return [candidate for candidate, _ in ranked]
