"""
Shelfmark exception hierarchy.

Provides typed exceptions for catalog lookups and analytics input handling.

Exception Hierarchy:
    ShelfmarkError (base)
    ├── ConfigurationError - Config file issues, invalid settings
    ├── InvalidInputError - Malformed query, identifier or progress value
    ├── SnapshotError - Unreadable or invalid library snapshot file
    └── SourceError - Catalog source failures
        ├── SourceUnavailableError - Transport/status/parse failure (try next source)
        └── BookNotFoundError - Source reachable, definitively no match
"""

from __future__ import annotations

from pathlib import Path
from typing import Any


class ShelfmarkError(Exception):
    """Base exception for all shelfmark errors."""

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        """
        Initialize shelfmark exception.

        Args:
            message: Human-readable error message
            details: Optional structured error details for logging/debugging
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(ShelfmarkError):
    """Configuration file or settings error."""

    def __init__(
        self,
        message: str,
        *,
        config_file: Path | str | None = None,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if config_file:
            details["config_file"] = str(config_file)
        if field:
            details["field"] = field
        super().__init__(message, details=details)
        self.config_file = config_file
        self.field = field


# =============================================================================
# Input Errors
# =============================================================================


class InvalidInputError(ShelfmarkError):
    """Malformed query, identifier or progress value supplied by the caller."""

    def __init__(
        self,
        message: str,
        *,
        value: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if value is not None:
            details["value"] = value
        super().__init__(message, details=details)
        self.value = value


class SnapshotError(ShelfmarkError):
    """Library snapshot could not be read or validated."""

    def __init__(
        self,
        message: str,
        *,
        snapshot_file: Path | str | None = None,
        errors: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if snapshot_file:
            details["snapshot_file"] = str(snapshot_file)
        if errors:
            details["errors"] = errors
        super().__init__(message, details=details)
        self.snapshot_file = snapshot_file
        self.errors = errors or []


# =============================================================================
# Catalog Source Errors
# =============================================================================


class SourceError(ShelfmarkError):
    """Catalog source failure."""

    def __init__(
        self,
        message: str,
        *,
        source: str | None = None,
        url: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if source:
            details["source"] = source
        if url:
            details["url"] = url
        if status_code:
            details["status_code"] = status_code
        super().__init__(message, details=details)
        self.source = source
        self.url = url
        self.status_code = status_code


class SourceUnavailableError(SourceError):
    """Source could not be reached or returned an unusable response.

    Retryable by moving on to the next step or source.
    """

    pass


class BookNotFoundError(SourceError):
    """Source answered, but has no book for the identifier."""

    def __init__(self, message: str, *, identifier: str | None = None, **kwargs: Any) -> None:
        details = kwargs.get("details") or {}
        if identifier:
            details["identifier"] = identifier
        kwargs["details"] = details
        super().__init__(message, **kwargs)
        self.identifier = identifier
