"""
Google Books client (primary catalog).

Google Books API: https://www.googleapis.com/books/v1
- GET /volumes?q={query}&maxResults=15&printType=books - Free-text search
- GET /volumes?q=intitle:{title} inauthor:{author}   - Structured search
- GET /volumes?q=isbn:{isbn}&maxResults=1             - Identifier search

Volumes without an ISBN are dropped: shelfmark keys every book by ISBN.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import ValidationError

from shelfmark.identifiers import normalize_identifier
from shelfmark.models import CandidateBook
from shelfmark.schemas.google_books import GoogleBooksResponse, GoogleBooksVolumeInfo
from shelfmark.sources.base import HttpSource
from shelfmark.utils.circuit_breaker import CircuitBreaker, google_books_breaker

if TYPE_CHECKING:
    from shelfmark.config import GoogleBooksSettings

logger = logging.getLogger(__name__)

# Sizes small enough that a zoom=2 request gives a sharper image
_THUMBNAIL_SIZES = frozenset({"thumbnail", "small_thumbnail"})


def secure_cover_url(size: str, url: str) -> str:
    """Force https and ask for a larger rendition of thumbnail-sized links."""
    if url.startswith("http://"):
        url = "https://" + url[len("http://") :]
    if size in _THUMBNAIL_SIZES:
        url = url.replace("zoom=1", "zoom=2")
    return url


def volume_to_candidate(
    info: GoogleBooksVolumeInfo, source: str = "google_books"
) -> CandidateBook | None:
    """Map a volumeInfo block to a CandidateBook, or None if it has no ISBN."""
    isbn = info.isbn()
    if not isbn:
        return None

    cover_url = None
    if info.image_links is not None and (largest := info.image_links.largest()):
        cover_url = secure_cover_url(*largest)

    return CandidateBook(
        identifier=normalize_identifier(isbn),
        title=info.title,
        authors=tuple(info.authors),
        publisher=info.publisher,
        published_date=info.published_date,
        page_count=info.page_count,
        description=info.description,
        cover_url=cover_url,
        source=source,
    )


class GoogleBooksSource(HttpSource):
    """Google Books volumes search.

    Example:
        >>> source = GoogleBooksSource()
        >>> for book in source.search("project hail mary"):
        ...     print(book.identifier, book.title)
    """

    name = "google_books"

    def __init__(
        self,
        base_url: str = "https://www.googleapis.com/books/v1",
        *,
        api_key: str = "",
        max_results: int = 15,
        timeout: float = 15.0,
        max_retries: int = 2,
        retry_base_delay: float = 0.5,
        breaker: CircuitBreaker | None = google_books_breaker,
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
        self.api_key = api_key
        self.max_results = max_results

    @classmethod
    def from_settings(cls, settings: GoogleBooksSettings, **kwargs: Any) -> GoogleBooksSource:
        """Create source from GoogleBooksSettings."""
        return cls(
            settings.base_url,
            api_key=settings.api_key,
            max_results=settings.max_results,
            timeout=settings.timeout_seconds,
            max_retries=settings.max_retries,
            **kwargs,
        )

    def _volumes(self, q: str, max_results: int) -> list[CandidateBook]:
        params: dict[str, Any] = {"q": q, "maxResults": max_results, "printType": "books"}
        if self.api_key:
            params["key"] = self.api_key

        data = self._get_json("/volumes", params)
        try:
            parsed = GoogleBooksResponse.model_validate(data)
        except ValidationError as e:
            raise self._invalid_payload(e, "volumes") from e

        if not parsed.items:
            logger.debug("Google Books: no items for %r", q)
            return []

        candidates = [
            c
            for item in parsed.items
            if (c := volume_to_candidate(item.volume_info, self.name)) is not None
        ]
        logger.debug(
            "Google Books: %d items, %d with ISBN for %r", len(parsed.items), len(candidates), q
        )
        return candidates

    def search(self, query: str) -> list[CandidateBook]:
        query = query.strip()
        if not query:
            return []
        return self._volumes(query, self.max_results)

    def search_by_title_author(
        self, title: str | None, author: str | None
    ) -> list[CandidateBook]:
        parts: list[str] = []
        if title and title.strip():
            parts.append(f"intitle:{title.strip()}")
        if author and author.strip():
            parts.append(f"inauthor:{author.strip()}")
        if not parts:
            return []
        return self._volumes(" ".join(parts), self.max_results)

    def lookup_by_identifier(self, identifier: str) -> CandidateBook | None:
        isbn = normalize_identifier(identifier)
        if not isbn:
            return None
        results = self._volumes(f"isbn:{isbn}", 1)
        return results[0] if results else None
