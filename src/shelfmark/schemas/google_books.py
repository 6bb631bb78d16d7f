"""Pydantic schemas for Google Books API response validation.

Only the fields shelfmark maps are declared. extra="ignore" lets the API add
fields without breaking parsing, while a missing title or a wrong type fails
validation and is reported as an unavailable source.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

# Largest first
IMAGE_SIZE_PREFERENCE: tuple[str, ...] = (
    "extra_large",
    "large",
    "medium",
    "small",
    "thumbnail",
    "small_thumbnail",
)


class GoogleBooksIdentifier(BaseModel):
    """Entry of volumeInfo.industryIdentifiers."""

    type: str
    identifier: str

    model_config = {"extra": "ignore"}


class GoogleBooksImageLinks(BaseModel):
    """volumeInfo.imageLinks. Sizes beyond thumbnail only appear on volume detail calls."""

    small_thumbnail: str | None = Field(default=None, alias="smallThumbnail")
    thumbnail: str | None = None
    small: str | None = None
    medium: str | None = None
    large: str | None = None
    extra_large: str | None = Field(default=None, alias="extraLarge")

    model_config = {"extra": "ignore", "populate_by_name": True}

    def largest(self) -> tuple[str, str] | None:
        """Return (size_name, url) for the largest available image."""
        for size in IMAGE_SIZE_PREFERENCE:
            url = getattr(self, size)
            if url:
                return size, url
        return None


class GoogleBooksVolumeInfo(BaseModel):
    """volumeInfo block of a volume."""

    title: str
    authors: list[str] = Field(default_factory=list)
    publisher: str | None = None
    published_date: str | None = Field(default=None, alias="publishedDate")
    description: str | None = None
    page_count: int | None = Field(default=None, alias="pageCount", ge=0)
    industry_identifiers: list[GoogleBooksIdentifier] = Field(
        default_factory=list, alias="industryIdentifiers"
    )
    image_links: GoogleBooksImageLinks | None = Field(default=None, alias="imageLinks")

    model_config = {"extra": "ignore", "populate_by_name": True}

    def isbn(self) -> str | None:
        """ISBN-13 if present, else ISBN-10, else None."""
        for wanted in ("ISBN_13", "ISBN_10"):
            for ident in self.industry_identifiers:
                if ident.type == wanted and ident.identifier:
                    return ident.identifier
        return None


class GoogleBooksVolume(BaseModel):
    """One entry of the ``items`` list."""

    id: str | None = None
    volume_info: GoogleBooksVolumeInfo = Field(alias="volumeInfo")

    model_config = {"extra": "ignore", "populate_by_name": True}


class GoogleBooksResponse(BaseModel):
    """Response from GET /volumes. ``items`` is absent when nothing matched."""

    total_items: int = Field(default=0, alias="totalItems")
    items: list[GoogleBooksVolume] = Field(default_factory=list)

    model_config = {"extra": "ignore", "populate_by_name": True}
