"""Tests for the resolver cascade."""

from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from unittest.mock import patch

import httpx
import pytest

from shelfmark.config import ResolverSettings
from shelfmark.covers import CoverCache
from shelfmark.exceptions import BookNotFoundError, InvalidInputError, SourceUnavailableError
from shelfmark.resolver import Resolver, merge_candidates
from shelfmark.sources.google_books import GoogleBooksSource
from shelfmark.sources.open_library import OpenLibrarySource
from tests.conftest import FakeSource, json_transport, make_candidate


def batch(prefix: str, count: int, title: str = "Book") -> list:
    return [make_candidate(f"{prefix}{i:03d}", title=f"{title} {i}") for i in range(count)]


class TestMergeCandidates:
    """Tests for merge_candidates()."""

    def test_first_occurrence_wins(self) -> None:
        first = make_candidate("978-0-00-000000-1", title="First")
        dupe = make_candidate("9780000000001", title="Duplicate")
        seen: set[str] = set()
        merged = merge_candidates([], [first, dupe], seen)
        assert [b.title for b in merged] == ["First"]
        assert seen == {"9780000000001"}

    def test_merge_is_idempotent(self) -> None:
        books = batch("A", 4) + batch("A", 2)
        seen: set[str] = set()
        once = merge_candidates([], books, seen)
        twice = merge_candidates(once, books, seen)
        assert len(once) == 4
        assert twice == once

    def test_does_not_modify_accumulated(self) -> None:
        accumulated = [make_candidate("1")]
        merge_candidates(accumulated, [make_candidate("2")], {"1"})
        assert len(accumulated) == 1


class TestResolveSteps:
    """Which steps run for which result counts."""

    def test_author_and_query_runs_all_steps_when_sparse(self) -> None:
        primary = FakeSource("primary")
        secondary = FakeSource("secondary")
        Resolver(primary, secondary).resolve("dune", author="herbert")
        assert primary.queries == ["herbert dune", "herbert", "dune"]
        assert secondary.queries == ["herbert dune"]

    def test_query_only_skips_author_steps(self) -> None:
        primary = FakeSource("primary")
        secondary = FakeSource("secondary")
        Resolver(primary, secondary).resolve("dune")
        assert primary.queries == ["dune"]
        assert secondary.queries == ["dune"]

    def test_enough_results_stop_the_cascade(self) -> None:
        primary = FakeSource("primary", responses={"herbert dune": batch("A", 10)})
        secondary = FakeSource("secondary")
        results = Resolver(primary, secondary).resolve("dune", author="herbert")
        assert primary.queries == ["herbert dune"]
        assert secondary.queries == []
        assert len(results) == 10

    def test_thresholds_use_merged_unique_counts(self) -> None:
        # 6 results, 3 of them repeated by the author-only step
        primary = FakeSource(
            "primary",
            responses={
                "herbert dune": batch("A", 6),
                "herbert": batch("A", 3),
            },
        )
        secondary = FakeSource("secondary")
        Resolver(primary, secondary).resolve("dune", author="herbert")
        # 6 unique < 10 runs author-only; still 6 >= 5 so query-only is skipped
        assert primary.queries == ["herbert dune", "herbert"]
        assert secondary.queries == []

    def test_secondary_only_below_fallback_threshold(self) -> None:
        primary = FakeSource("primary", responses={"dune": batch("A", 3)})
        secondary = FakeSource("secondary")
        Resolver(primary, secondary).resolve("dune")
        assert secondary.queries == []

    def test_custom_thresholds(self) -> None:
        primary = FakeSource("primary", responses={"dune": batch("A", 1)})
        secondary = FakeSource("secondary")
        settings = ResolverSettings(query_only_threshold=5, fallback_threshold=1)
        Resolver(primary, secondary, settings=settings).resolve("dune")
        assert secondary.queries == []

    def test_author_only_search(self) -> None:
        primary = FakeSource("primary", responses={"herbert": batch("A", 2)})
        results = Resolver(primary, FakeSource("secondary")).resolve("", author="herbert")
        assert primary.queries == ["herbert"]
        assert len(results) == 2

    def test_blank_query_and_author_rejected(self) -> None:
        with pytest.raises(InvalidInputError):
            Resolver(FakeSource()).resolve("   ", author=" ")


class TestResolveMergingAndRanking:
    def test_duplicates_across_sources_dropped(self) -> None:
        shared = make_candidate("9780441013593", title="Dune", source="primary")
        primary = FakeSource("primary", responses={"dune": [shared]})
        secondary = FakeSource(
            "secondary",
            responses={
                "dune": [
                    make_candidate("978-0-441-01359-3", title="Dune (OL)", source="secondary"),
                    make_candidate("9780593099322", title="Dune Messiah", source="secondary"),
                ]
            },
        )
        results = Resolver(primary, secondary).resolve("dune")
        assert [b.title for b in results] == ["Dune", "Dune Messiah"]

    def test_results_ranked_by_score(self) -> None:
        guide = make_candidate("1", title="The Great Gatsby: Study Guide")
        real = make_candidate("2", title="The Great Gatsby", authors=("F. Scott Fitzgerald",))
        primary = FakeSource("primary", responses={"fitzgerald the great gatsby": [guide, real]})
        results = Resolver(primary).resolve("the great gatsby", author="fitzgerald")
        assert results[0] is real


class TestResolveFailures:
    """Source failures are swallowed unless nothing at all worked."""

    def test_primary_down_secondary_answers(self) -> None:
        primary = FakeSource("primary", fail_all=True)
        secondary = FakeSource(
            "secondary",
            responses={
                "herbert dune": [
                    make_candidate("1", title="The Road to Arrakis"),
                    make_candidate("2", title="Dune"),
                ]
            },
        )
        results = Resolver(primary, secondary).resolve("dune", author="herbert")
        assert [b.title for b in results] == ["Dune", "The Road to Arrakis"]

    def test_one_failing_step_does_not_stop_the_rest(self) -> None:
        primary = FakeSource(
            "primary",
            responses={
                "herbert dune": SourceUnavailableError("flaky", source="primary"),
                "dune": batch("A", 5),
            },
        )
        results = Resolver(primary, FakeSource("secondary")).resolve("dune", author="herbert")
        assert primary.queries == ["herbert dune", "herbert", "dune"]
        assert len(results) == 5

    def test_all_steps_fail_raises_once(self) -> None:
        primary = FakeSource("primary", fail_all=True)
        secondary = FakeSource("secondary", fail_all=True)
        with pytest.raises(SourceUnavailableError):
            Resolver(primary, secondary).resolve("dune", author="herbert")
        assert primary.queries == ["herbert dune", "herbert", "dune"]
        assert secondary.queries == ["herbert dune"]

    def test_reachable_sources_with_no_results_is_empty(self) -> None:
        assert Resolver(FakeSource("primary"), FakeSource("secondary")).resolve("zzz") == []

    def test_partial_failure_with_zero_results_is_empty(self) -> None:
        primary = FakeSource("primary", fail_all=True)
        assert Resolver(primary, FakeSource("secondary")).resolve("zzz") == []


class TestResolveByIdentifier:
    def test_primary_hit(self) -> None:
        book = make_candidate("9780441013593", title="Dune")
        primary = FakeSource("primary", lookups={"9780441013593": book})
        secondary = FakeSource("secondary")
        assert Resolver(primary, secondary).resolve_by_identifier("978-0-441-01359-3") is book
        assert secondary.queries == []

    def test_falls_back_to_secondary(self) -> None:
        book = make_candidate("9780441013593", title="Dune")
        primary = FakeSource("primary")
        secondary = FakeSource("secondary", lookups={"9780441013593": book})
        assert Resolver(primary, secondary).resolve_by_identifier("9780441013593") is book

    def test_secondary_used_when_primary_down(self) -> None:
        book = make_candidate("9780441013593", title="Dune")
        primary = FakeSource("primary", fail_all=True)
        secondary = FakeSource("secondary", lookups={"9780441013593": book})
        assert Resolver(primary, secondary).resolve_by_identifier("9780441013593") is book

    def test_not_found(self) -> None:
        with pytest.raises(BookNotFoundError) as exc_info:
            Resolver(FakeSource("primary"), FakeSource("secondary")).resolve_by_identifier(
                "9780000000000"
            )
        assert exc_info.value.identifier == "9780000000000"

    def test_not_found_when_one_source_down(self) -> None:
        primary = FakeSource("primary", fail_all=True)
        with pytest.raises(BookNotFoundError):
            Resolver(primary, FakeSource("secondary")).resolve_by_identifier("9780000000000")

    def test_all_down(self) -> None:
        primary = FakeSource("primary", fail_all=True)
        secondary = FakeSource("secondary", fail_all=True)
        with pytest.raises(SourceUnavailableError):
            Resolver(primary, secondary).resolve_by_identifier("9780000000000")

    @pytest.mark.parametrize("value", ["", "hello", "12345", "97804410135931"])
    def test_rejects_non_isbn(self, value: str) -> None:
        with pytest.raises(InvalidInputError):
            Resolver(FakeSource()).resolve_by_identifier(value)


class TestFetchCover:
    def test_cached_cover_skips_download(self, tmp_path: Path) -> None:
        cache = CoverCache(tmp_path)
        cache.put("9780441013593", b"jpeg")
        book = make_candidate("9780441013593", cover_url="https://img/1.jpg")
        with patch("shelfmark.resolver.fetch_cover") as download:
            assert Resolver(FakeSource(), cover_cache=cache).fetch_cover(book) == b"jpeg"
        download.assert_not_called()

    def test_downloads_and_stores(self, tmp_path: Path) -> None:
        cache = CoverCache(tmp_path)
        book = make_candidate("9780441013593", cover_url="https://img/1.jpg")
        with patch("shelfmark.resolver.fetch_cover", return_value=b"fresh") as download:
            assert Resolver(FakeSource(), cover_cache=cache).fetch_cover(book) == b"fresh"
        download.assert_called_once_with("https://img/1.jpg")
        assert (tmp_path / "9780441013593.jpg").read_bytes() == b"fresh"

    def test_no_cover_url(self, tmp_path: Path) -> None:
        resolver = Resolver(FakeSource(), cover_cache=CoverCache(tmp_path))
        assert resolver.fetch_cover(make_candidate("9780441013593")) is None

    def test_failed_download_not_cached(self, tmp_path: Path) -> None:
        cache = CoverCache(tmp_path)
        book = make_candidate("9780441013593", cover_url="https://img/1.jpg")
        with patch("shelfmark.resolver.fetch_cover", return_value=None):
            assert Resolver(FakeSource(), cover_cache=cache).fetch_cover(book) is None
        assert cache.get("9780441013593") is None


# Catalog responses keyed by query. Each Open Library list repeats one Google
# Books ISBN in hyphenated form, and each Google Books list leads with a
# weak match that ranking must push down.
GOOGLE_CATALOG = {
    "dune": [("Frank Herbert: A Life", "9780000000101"), ("Dune", "9780441013593")],
    "the martian": [("Mars Field Guide", "9780000000202"), ("The Martian", "9780553418026")],
    "circe": [("Greek Myths Retold", "9780000000303"), ("Circe", "9780316556347")],
}
OPEN_LIBRARY_CATALOG = {
    "dune": [("Dune (OL)", "978-0-441-01359-3"), ("Children of Dune", "9780593098240")],
    "the martian": [
        ("The Martian (OL)", "978-0-553-41802-6"),
        ("The Martian Chronicles", "9781451678192"),
    ],
    "circe": [("Circe (OL)", "978-0-316-55634-7"), ("Circe: A Novel", "9780316556323")],
}
EXPECTED = {
    "dune": ["Dune", "Children of Dune", "Frank Herbert: A Life"],
    "the martian": ["The Martian", "The Martian Chronicles", "Mars Field Guide"],
    "circe": ["Circe", "Circe: A Novel", "Greek Myths Retold"],
}


def google_handler(request: httpx.Request) -> httpx.Response:
    time.sleep(0.005)
    books = GOOGLE_CATALOG.get(request.url.params["q"], [])
    items = [
        {
            "volumeInfo": {
                "title": title,
                "industryIdentifiers": [{"type": "ISBN_13", "identifier": isbn}],
            }
        }
        for title, isbn in books
    ]
    return httpx.Response(200, json={"totalItems": len(items), "items": items})


def open_library_handler(request: httpx.Request) -> httpx.Response:
    time.sleep(0.005)
    books = OPEN_LIBRARY_CATALOG.get(request.url.params["q"], [])
    docs = [{"title": title, "isbn": [isbn]} for title, isbn in books]
    return httpx.Response(200, json={"numFound": len(docs), "docs": docs})


class TestConcurrentResolve:
    """One resolver shared by many threads, as a server would use it."""

    def test_each_call_gets_its_own_results(self) -> None:
        resolver = Resolver(
            GoogleBooksSource(
                "https://books.test/v1",
                max_retries=0,
                breaker=None,
                transport=json_transport(google_handler),
            ),
            OpenLibrarySource(
                "https://openlibrary.test",
                max_retries=0,
                breaker=None,
                transport=json_transport(open_library_handler),
            ),
            settings=ResolverSettings(),
        )
        queries = list(EXPECTED) * 8

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(resolver.resolve, queries))

        for query, found in zip(queries, results, strict=True):
            assert [b.title for b in found] == EXPECTED[query]
            assert found[0].source == "google_books"
            assert len({b.identifier for b in found}) == len(found)
