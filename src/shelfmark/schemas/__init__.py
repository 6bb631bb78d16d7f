"""Pydantic schemas for catalog responses and library snapshot files."""

from shelfmark.schemas.google_books import (
    GoogleBooksIdentifier,
    GoogleBooksImageLinks,
    GoogleBooksResponse,
    GoogleBooksVolume,
    GoogleBooksVolumeInfo,
)
from shelfmark.schemas.open_library import (
    OpenLibraryAuthor,
    OpenLibraryEdition,
    OpenLibrarySearchDoc,
    OpenLibrarySearchResponse,
    OpenLibraryWork,
)
from shelfmark.schemas.snapshot import (
    BookRecord,
    ProgressEntryRecord,
    SnapshotFile,
    validate_snapshot,
)

__all__ = [
    # Google Books
    "GoogleBooksIdentifier",
    "GoogleBooksImageLinks",
    "GoogleBooksResponse",
    "GoogleBooksVolume",
    "GoogleBooksVolumeInfo",
    # Open Library
    "OpenLibraryAuthor",
    "OpenLibraryEdition",
    "OpenLibrarySearchDoc",
    "OpenLibrarySearchResponse",
    "OpenLibraryWork",
    # Snapshot
    "BookRecord",
    "ProgressEntryRecord",
    "SnapshotFile",
    "validate_snapshot",
]
