"""Shared pytest fixtures and helpers for shelfmark tests."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from datetime import datetime
from typing import Any

import httpx
import pytest

from shelfmark.config import clear_settings_cache
from shelfmark.exceptions import SourceUnavailableError
from shelfmark.models import CandidateBook, ProgressLogEntry, ReadStatus, TrackedBook
from shelfmark.utils.circuit_breaker import reset_all_breakers


@pytest.fixture(autouse=True)
def _isolate_global_state(monkeypatch: pytest.MonkeyPatch, tmp_path_factory) -> Iterator[None]:
    """Fresh breakers and settings, and keep config/cache lookups out of $HOME."""
    base = tmp_path_factory.mktemp("shelfmark-home")
    monkeypatch.setenv("SHELFMARK_CACHE_DIR", str(base / "cache"))
    monkeypatch.setenv("SHELFMARK_CONFIG_DIR", str(base / "config"))
    monkeypatch.setenv("SHELFMARK_LOG_DIR", str(base / "logs"))
    reset_all_breakers()
    clear_settings_cache()
    yield
    reset_all_breakers()
    clear_settings_cache()


def make_candidate(
    identifier: str = "9780000000001",
    title: str = "Some Book",
    authors: tuple[str, ...] = (),
    **kwargs: Any,
) -> CandidateBook:
    """Create a CandidateBook with sensible defaults."""
    return CandidateBook(identifier=identifier, title=title, authors=authors, **kwargs)


def make_book(
    identifier: str = "9780000000001",
    title: str = "Some Book",
    status: ReadStatus = ReadStatus.NOT_STARTED,
    **kwargs: Any,
) -> TrackedBook:
    """Create a TrackedBook with sensible defaults."""
    return TrackedBook(identifier=identifier, title=title, status=status, **kwargs)


def make_entry(
    timestamp: datetime,
    page: int | None = None,
    identifier: str = "9780000000001",
    percentage: float | None = None,
) -> ProgressLogEntry:
    return ProgressLogEntry(
        book_identifier=identifier, timestamp=timestamp, page=page, percentage=percentage
    )


class FakeSource:
    """In-memory CatalogSource.

    ``responses`` maps a search string to a list of candidates or to an
    exception to raise. Unknown queries return [].
    """

    def __init__(
        self,
        name: str = "fake",
        responses: dict[str, list[CandidateBook] | Exception] | None = None,
        lookups: dict[str, CandidateBook | None | Exception] | None = None,
        fail_all: bool = False,
    ) -> None:
        self.name = name
        self.responses = responses or {}
        self.lookups = lookups or {}
        self.fail_all = fail_all
        self.queries: list[str] = []

    def _answer(self, key: str, table: dict[str, Any], default: Any) -> Any:
        if self.fail_all:
            raise SourceUnavailableError(f"{self.name} down", source=self.name)
        value = table.get(key, default)
        if isinstance(value, Exception):
            raise value
        return value

    def search(self, query: str) -> list[CandidateBook]:
        self.queries.append(query)
        return list(self._answer(query, self.responses, []))

    def search_by_title_author(
        self, title: str | None, author: str | None
    ) -> list[CandidateBook]:
        return self.search(" ".join(p for p in (author, title) if p))

    def lookup_by_identifier(self, identifier: str) -> CandidateBook | None:
        self.queries.append(f"isbn:{identifier}")
        return self._answer(identifier, self.lookups, None)


def json_transport(
    routes: dict[str, Any] | Callable[[httpx.Request], httpx.Response],
) -> httpx.MockTransport:
    """MockTransport answering by URL path.

    ``routes`` maps a path to a JSON body, an ``(status, body)`` tuple, or an
    exception instance to raise. Unknown paths get a 404.
    """
    if callable(routes):
        return httpx.MockTransport(routes)

    def handler(request: httpx.Request) -> httpx.Response:
        value = routes.get(request.url.path)
        if value is None:
            return httpx.Response(404, json={"error": "not found"})
        if isinstance(value, Exception):
            raise value
        if isinstance(value, tuple):
            status, body = value
            if isinstance(body, str | bytes):
                return httpx.Response(status, content=body)
            return httpx.Response(status, json=body)
        return httpx.Response(200, json=value)

    return httpx.MockTransport(handler)
