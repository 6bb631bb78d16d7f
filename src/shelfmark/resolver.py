"""
Book metadata resolver.

Runs a cascade of catalog searches, merging results as it goes:

1. Primary: "<author> <query>" (only when an author is given)
2. Primary: author alone, while results < author_only_threshold
3. Primary: query alone, while results < query_only_threshold
4. Secondary: "<author> <query>" or query, while results < fallback_threshold

Each step depends on the merged count of the steps before it, so steps run
one after another. A failing step is logged and skipped; the cascade only
fails when every attempted step failed and nothing was found.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from shelfmark.covers import CoverCache, fetch_cover
from shelfmark.exceptions import BookNotFoundError, InvalidInputError, SourceUnavailableError
from shelfmark.identifiers import is_isbn_like, normalize_identifier
from shelfmark.models import CandidateBook
from shelfmark.scoring import rank_candidates
from shelfmark.sources.base import CatalogSource

if TYPE_CHECKING:
    from shelfmark.config import ResolverSettings, Settings

logger = logging.getLogger(__name__)


def merge_candidates(
    accumulated: list[CandidateBook],
    new: Iterable[CandidateBook],
    seen: set[str],
) -> list[CandidateBook]:
    """Append candidates whose normalized identifier is not in ``seen``.

    First occurrence wins. ``seen`` is updated in place. Merging the same batch
    twice leaves the result unchanged.

    Returns:
        The merged list (a new list; ``accumulated`` is not modified)
    """
    merged = list(accumulated)
    for candidate in new:
        key = normalize_identifier(candidate.identifier)
        if not key or key in seen:
            continue
        seen.add(key)
        merged.append(candidate)
    return merged


@dataclass
class _Cascade:
    """Book-keeping for one resolve() call."""

    results: list[CandidateBook]
    seen: set[str]
    attempted: int = 0
    failed: int = 0
    last_error: SourceUnavailableError | None = None

    def run(self, source: CatalogSource, query: str) -> None:
        self.attempted += 1
        try:
            found = source.search(query)
        except SourceUnavailableError as e:
            self.failed += 1
            self.last_error = e
            logger.warning("Search step '%s' on %s failed: %s", query, source.name, e)
            return
        before = len(self.results)
        self.results = merge_candidates(self.results, found, self.seen)
        logger.debug(
            "Search step '%s' on %s: %d found, %d new",
            query,
            source.name,
            len(found),
            len(self.results) - before,
        )


class Resolver:
    """Resolve free text or ISBNs to candidate books.

    Args:
        primary: Catalog queried first (Google Books)
        secondary: Fallback catalog (Open Library), optional
        settings: Step thresholds (defaults 10/5/3)
        cover_cache: Optional cache consulted by fetch_cover()
    """

    def __init__(
        self,
        primary: CatalogSource,
        secondary: CatalogSource | None = None,
        settings: ResolverSettings | None = None,
        cover_cache: CoverCache | None = None,
    ) -> None:
        if settings is None:
            from shelfmark.config import ResolverSettings

            settings = ResolverSettings()
        self.primary = primary
        self.secondary = secondary
        self.settings = settings
        self.cover_cache = cover_cache

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> Resolver:
        """Build a resolver wired to Google Books, Open Library and the cover cache."""
        from shelfmark.sources.google_books import GoogleBooksSource
        from shelfmark.sources.open_library import OpenLibrarySource

        cover_cache = kwargs.pop(
            "cover_cache",
            CoverCache(
                settings.covers.directory,
                memory_capacity=settings.covers.memory_capacity,
            ),
        )
        return cls(
            GoogleBooksSource.from_settings(settings.google_books),
            OpenLibrarySource.from_settings(settings.open_library),
            settings=settings.resolver,
            cover_cache=cover_cache,
            **kwargs,
        )

    def resolve(self, query: str, author: str | None = None) -> list[CandidateBook]:
        """Search both catalogs and return candidates ranked by relevance.

        Raises:
            InvalidInputError: Query and author are both blank.
            SourceUnavailableError: Every attempted step failed and nothing was found.
        """
        query = (query or "").strip()
        author = (author or "").strip() or None
        if not query and not author:
            raise InvalidInputError("Enter a title, author or ISBN to search", value=query)

        combined = f"{author} {query}".strip() if author else query
        cascade = _Cascade(results=[], seen=set())
        s = self.settings

        if author:
            cascade.run(self.primary, combined)
            if combined != author and len(cascade.results) < s.author_only_threshold:
                cascade.run(self.primary, author)

        if query and len(cascade.results) < s.query_only_threshold:
            cascade.run(self.primary, query)

        if self.secondary is not None and len(cascade.results) < s.fallback_threshold:
            cascade.run(self.secondary, combined)

        if cascade.attempted and cascade.failed == cascade.attempted and not cascade.results:
            raise SourceUnavailableError(
                "No catalog could be reached. Check your connection and try again.",
                source=cascade.last_error.source if cascade.last_error else None,
                details={"steps_failed": cascade.failed},
            ) from cascade.last_error

        logger.info(
            "Resolved '%s'%s: %d candidates (%d/%d steps failed)",
            query,
            f" by '{author}'" if author else "",
            len(cascade.results),
            cascade.failed,
            cascade.attempted,
        )
        return rank_candidates(cascade.results, query, author)

    def resolve_by_identifier(self, identifier: str) -> CandidateBook:
        """Look up one book by ISBN, primary catalog first.

        Raises:
            InvalidInputError: Identifier does not look like an ISBN.
            BookNotFoundError: A catalog answered but had no match.
            SourceUnavailableError: No catalog could be reached.
        """
        isbn = normalize_identifier(identifier)
        if not is_isbn_like(isbn):
            raise InvalidInputError(f"Not an ISBN: {identifier!r}", value=identifier)

        answered = False
        last_error: SourceUnavailableError | None = None
        for source in (self.primary, self.secondary):
            if source is None:
                continue
            try:
                found = source.lookup_by_identifier(isbn)
            except SourceUnavailableError as e:
                logger.warning("ISBN lookup %s on %s failed: %s", isbn, source.name, e)
                last_error = e
                continue
            if found is not None:
                logger.info("ISBN %s resolved by %s: '%s'", isbn, source.name, found.title)
                return found
            answered = True
            logger.debug("%s has no match for ISBN %s", source.name, isbn)

        if answered:
            raise BookNotFoundError(f"No book found for ISBN {isbn}", identifier=isbn)
        raise SourceUnavailableError(
            f"Could not look up ISBN {isbn}: no catalog reachable",
            source=last_error.source if last_error else None,
        ) from last_error

    def fetch_cover(self, candidate: CandidateBook) -> bytes | None:
        """Cover bytes for ``candidate``, from the cache when possible."""
        if self.cover_cache is not None:
            cached = self.cover_cache.get(candidate.identifier)
            if cached is not None:
                return cached
        if not candidate.cover_url:
            return None

        data = fetch_cover(candidate.cover_url)
        if data is not None and self.cover_cache is not None:
            self.cover_cache.put(candidate.identifier, data)
        return data
