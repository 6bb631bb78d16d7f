"""
Open Library client (secondary catalog).

Open Library API: https://openlibrary.org
- GET /search.json?q={query}&limit=20 - Free-text search
- GET /search.json?title=..&author=.. - Structured search
- GET /isbn/{isbn}.json               - Edition by ISBN
- GET /works/{id}.json                - Work (description)
- GET /authors/{id}.json              - Author (name)

Identifier lookups chain the last three calls. The work and author calls are
optional: a failure there only drops the description or that author's name.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import ValidationError

from shelfmark.exceptions import SourceUnavailableError
from shelfmark.identifiers import normalize_identifier
from shelfmark.models import CandidateBook
from shelfmark.schemas.open_library import (
    OpenLibraryAuthor,
    OpenLibraryEdition,
    OpenLibrarySearchResponse,
    OpenLibraryWork,
)
from shelfmark.sources.base import HttpSource
from shelfmark.utils.circuit_breaker import CircuitBreaker, open_library_breaker

if TYPE_CHECKING:
    from shelfmark.config import OpenLibrarySettings

logger = logging.getLogger(__name__)


class OpenLibrarySource(HttpSource):
    """Open Library search and ISBN lookup.

    Example:
        >>> source = OpenLibrarySource()
        >>> book = source.lookup_by_identifier("978-0-06-231611-0")
    """

    name = "open_library"

    def __init__(
        self,
        base_url: str = "https://openlibrary.org",
        *,
        covers_url: str = "https://covers.openlibrary.org",
        search_limit: int = 20,
        timeout: float = 15.0,
        max_retries: int = 2,
        retry_base_delay: float = 0.5,
        breaker: CircuitBreaker | None = open_library_breaker,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        super().__init__(
            base_url,
            timeout=timeout,
            max_retries=max_retries,
            retry_base_delay=retry_base_delay,
            breaker=breaker,
            transport=transport,
        )
        self.covers_url = covers_url.rstrip("/")
        self.search_limit = search_limit

    @classmethod
    def from_settings(cls, settings: OpenLibrarySettings, **kwargs: Any) -> OpenLibrarySource:
        """Create source from OpenLibrarySettings."""
        return cls(
            settings.base_url,
            covers_url=settings.covers_url,
            search_limit=settings.search_limit,
            timeout=settings.timeout_seconds,
            max_retries=settings.max_retries,
            **kwargs,
        )

    def cover_url(self, isbn: str, size: str = "M") -> str:
        return f"{self.covers_url}/b/isbn/{isbn}-{size}.jpg"

    # -------------------------------------------------------------------------
    # Search
    # -------------------------------------------------------------------------

    def _search(self, params: dict[str, Any]) -> list[CandidateBook]:
        params = {**params, "limit": self.search_limit}
        data = self._get_json("/search.json", params)
        try:
            parsed = OpenLibrarySearchResponse.model_validate(data)
        except ValidationError as e:
            raise self._invalid_payload(e, "search") from e

        candidates: list[CandidateBook] = []
        for doc in parsed.docs:
            isbn = next((normalize_identifier(i) for i in doc.isbn if i), "")
            if not isbn:
                continue
            candidates.append(
                CandidateBook(
                    identifier=isbn,
                    title=doc.title,
                    authors=tuple(doc.author_name),
                    publisher=doc.publisher[0] if doc.publisher else None,
                    published_date=(
                        str(doc.first_publish_year) if doc.first_publish_year else None
                    ),
                    page_count=doc.number_of_pages_median,
                    cover_url=self.cover_url(isbn, "M"),
                    source=self.name,
                )
            )
        logger.debug("Open Library: %d docs, %d with ISBN", len(parsed.docs), len(candidates))
        return candidates

    def search(self, query: str) -> list[CandidateBook]:
        query = query.strip()
        if not query:
            return []
        return self._search({"q": query})

    def search_by_title_author(
        self, title: str | None, author: str | None
    ) -> list[CandidateBook]:
        params: dict[str, Any] = {}
        if title and title.strip():
            params["title"] = title.strip()
        if author and author.strip():
            params["author"] = author.strip()
        if not params:
            return []
        return self._search(params)

    # -------------------------------------------------------------------------
    # Identifier lookup
    # -------------------------------------------------------------------------

    def lookup_by_identifier(self, identifier: str) -> CandidateBook | None:
        isbn = normalize_identifier(identifier)
        if not isbn:
            return None

        data = self._get_json(f"/isbn/{isbn}.json", not_found_ok=True)
        if data is None:
            return None
        try:
            edition = OpenLibraryEdition.model_validate(data)
        except ValidationError as e:
            raise self._invalid_payload(e, "edition") from e

        canonical = edition.isbn()
        if not canonical:
            logger.info("Open Library edition for %s carries no ISBN, dropping it", isbn)
            return None
        canonical = normalize_identifier(canonical)

        description = None
        if edition.works:
            description = self._work_description(edition.works[0].key)

        authors = tuple(
            name for ref in edition.authors if (name := self._author_name(ref.key)) is not None
        )

        return CandidateBook(
            identifier=canonical,
            title=edition.title,
            authors=authors,
            publisher=edition.publishers[0] if edition.publishers else None,
            published_date=edition.publish_date,
            page_count=edition.number_of_pages,
            description=description,
            cover_url=self.cover_url(canonical, "L"),
            source=self.name,
        )

    def _work_description(self, key: str) -> str | None:
        """Description of a work, or None on any failure."""
        try:
            data = self._get_json(f"{key}.json", not_found_ok=True)
            if data is None:
                return None
            return OpenLibraryWork.model_validate(data).description
        except (SourceUnavailableError, ValidationError) as e:
            logger.warning("Skipping description for %s: %s", key, e)
            return None

    def _author_name(self, key: str) -> str | None:
        """Display name of an author, or None on any failure."""
        try:
            data = self._get_json(f"{key}.json", not_found_ok=True)
            if data is None:
                return None
            return OpenLibraryAuthor.model_validate(data).name
        except (SourceUnavailableError, ValidationError) as e:
            logger.warning("Skipping author %s: %s", key, e)
            return None
