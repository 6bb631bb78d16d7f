"""Pydantic schemas for Open Library API response validation."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator


class OpenLibrarySearchDoc(BaseModel):
    """One document of /search.json."""

    title: str
    author_name: list[str] = Field(default_factory=list)
    isbn: list[str] = Field(default_factory=list)
    publisher: list[str] = Field(default_factory=list)
    first_publish_year: int | None = None
    number_of_pages_median: int | None = Field(default=None, ge=0)

    model_config = {"extra": "ignore"}


class OpenLibrarySearchResponse(BaseModel):
    """Response from GET /search.json."""

    num_found: int = Field(default=0, alias="numFound")
    docs: list[OpenLibrarySearchDoc] = Field(default_factory=list)

    model_config = {"extra": "ignore", "populate_by_name": True}


class OpenLibraryKeyRef(BaseModel):
    """``{"key": "/authors/OL1A"}`` style reference."""

    key: str

    model_config = {"extra": "ignore"}


class OpenLibraryEdition(BaseModel):
    """Response from GET /isbn/{isbn}.json (an edition record)."""

    title: str
    authors: list[OpenLibraryKeyRef] = Field(default_factory=list)
    works: list[OpenLibraryKeyRef] = Field(default_factory=list)
    publishers: list[str] = Field(default_factory=list)
    publish_date: str | None = None
    number_of_pages: int | None = Field(default=None, ge=0)
    isbn_13: list[str] = Field(default_factory=list)
    isbn_10: list[str] = Field(default_factory=list)

    model_config = {"extra": "ignore"}

    def isbn(self) -> str | None:
        """First ISBN-13, else first ISBN-10, else None."""
        for values in (self.isbn_13, self.isbn_10):
            for value in values:
                if value:
                    return value
        return None


class OpenLibraryWork(BaseModel):
    """Response from GET /works/{id}.json.

    ``description`` is either a plain string or ``{"type": ..., "value": ...}``.
    """

    description: str | None = None

    model_config = {"extra": "ignore"}

    @field_validator("description", mode="before")
    @classmethod
    def unwrap_description(cls, v: Any) -> Any:
        if isinstance(v, dict):
            return v.get("value")
        return v


class OpenLibraryAuthor(BaseModel):
    """Response from GET /authors/{id}.json."""

    name: str

    model_config = {"extra": "ignore"}
