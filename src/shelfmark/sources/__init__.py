"""Catalog sources: Google Books (primary) and Open Library (secondary)."""

from shelfmark.sources.base import CatalogSource, HttpSource
from shelfmark.sources.google_books import GoogleBooksSource
from shelfmark.sources.open_library import OpenLibrarySource

__all__ = [
    "CatalogSource",
    "GoogleBooksSource",
    "HttpSource",
    "OpenLibrarySource",
]
