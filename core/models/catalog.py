# =============================================================================
# core/models/catalog.py - Catalog Schemas
# =============================================================================
# These models define the API contract for catalog operations:
# - CatalogEntry: One listed application, as stored (includes download_url)
# - EntrySummary: Public view of an entry (download_url is never exposed;
#   clients obtain it through a download grant)
# - EntryCreate / EntryUpdate: Admin write payloads
# - Tag: Free-form label attached to apps
# - *Page: Paginated listing responses
# =============================================================================

from datetime import datetime, timezone
from enum import IntEnum
from math import ceil
from typing import Any
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator

from .category import Category, DEFAULT_CATEGORY_ID
from .locale import Locale


class EntryStatus(IntEnum):
    """
    Publication state of an entry.

    Only published entries appear in category, search and tag listings.
    """
    DRAFT = 0
    PUBLISHED = 1


def is_http_url(value: str) -> bool:
    """True for absolute http(s) URLs with a host."""
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def _parse_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value:
        # Supabase returns ISO strings, sometimes with a trailing Z
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    return datetime.now(timezone.utc)


# =============================================================================
# Entries
# =============================================================================

class CatalogEntry(BaseModel):
    """
    A single listed application in one locale.

    The same appid exists in both locale tables; the rows are edited
    independently.
    """

    appid: int = Field(..., description="App id, shared across locales")
    title: str
    intro: str | None = None
    content: str = ""
    date: datetime = Field(..., description="Publication/update timestamp")
    author: str | None = None
    website: str | None = None
    logo: str | None = None
    screenshot: str | None = None
    download_url: str | None = Field(
        default=None,
        description="Real asset URL; only handed out through a download grant"
    )
    category: int = DEFAULT_CATEGORY_ID
    status: EntryStatus = EntryStatus.DRAFT

    @classmethod
    def from_db_row(cls, row: dict[str, Any]) -> "CatalogEntry":
        """Build an entry from a database row dict."""
        data = dict(row)
        data["date"] = _parse_datetime(data.get("date"))
        return cls(**data)

    def to_summary(self) -> "EntrySummary":
        """Public view without the download target."""
        return EntrySummary(**self.model_dump(exclude={"download_url", "status"}))

    @property
    def has_download_target(self) -> bool:
        return bool(self.download_url and self.download_url.strip())


class EntrySummary(BaseModel):
    """
    Entry as returned by public endpoints.

    Example:
        {
            "appid": 2774,
            "title": "7-Zip",
            "intro": "File archiver",
            "content": "...",
            "date": "2024-01-15T10:30:00Z",
            "category": 7
        }
    """

    appid: int
    title: str
    intro: str | None = None
    content: str = ""
    date: datetime
    author: str | None = None
    website: str | None = None
    logo: str | None = None
    screenshot: str | None = None
    category: int


class EntryCreate(BaseModel):
    """Admin payload for creating an entry."""

    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(default="")
    category: int = Field(default=DEFAULT_CATEGORY_ID, ge=0)
    download_url: str = Field(..., max_length=255)
    intro: str | None = Field(default=None, max_length=255)
    author: str | None = Field(default=None, max_length=255)
    website: str | None = Field(default=None, max_length=255)
    logo: str | None = Field(default=None, max_length=255)
    screenshot: str | None = Field(default=None, max_length=255)
    status: EntryStatus = EntryStatus.PUBLISHED
    locale: Locale = Locale.ZH

    @field_validator("download_url")
    @classmethod
    def _check_download_url(cls, value: str) -> str:
        if not is_http_url(value):
            raise ValueError("download_url must be an absolute http(s) URL")
        return value


class EntryUpdate(BaseModel):
    """
    Admin payload for updating an entry.

    Only fields that are set are written.
    """

    title: str | None = Field(default=None, min_length=1, max_length=255)
    content: str | None = None
    category: int | None = Field(default=None, ge=0)
    download_url: str | None = Field(default=None, max_length=255)
    intro: str | None = Field(default=None, max_length=255)
    author: str | None = Field(default=None, max_length=255)
    website: str | None = Field(default=None, max_length=255)
    logo: str | None = Field(default=None, max_length=255)
    screenshot: str | None = Field(default=None, max_length=255)
    status: EntryStatus | None = None
    date: datetime | None = None

    @field_validator("download_url")
    @classmethod
    def _check_download_url(cls, value: str | None) -> str | None:
        if value is not None and not is_http_url(value):
            raise ValueError("download_url must be an absolute http(s) URL")
        return value

    def changes(self) -> dict[str, Any]:
        """Fields explicitly provided by the caller."""
        return self.model_dump(exclude_unset=True)


# =============================================================================
# Tags
# =============================================================================

class Tag(BaseModel):
    """A label with a Chinese and an English name."""

    id: int
    name: str = Field(..., description="Chinese name")
    enname: str = Field(..., description="English name")

    def display_name(self, locale: Locale) -> str:
        return self.enname if locale == Locale.EN else self.name


class TaggedEntry(EntrySummary):
    """Entry listed under a tag, carrying the tag's localized name."""

    tag_name: str


# =============================================================================
# Pagination
# =============================================================================

class Pagination(BaseModel):
    page: int
    page_size: int
    total: int
    total_pages: int

    @classmethod
    def build(cls, page: int, page_size: int, total: int) -> "Pagination":
        return cls(
            page=page,
            page_size=page_size,
            total=total,
            total_pages=total_pages(total, page_size),
        )


def total_pages(total: int, page_size: int) -> int:
    """Number of pages needed for `total` items."""
    return ceil(total / page_size) if page_size > 0 else 0


def page_offset(page: int, page_size: int) -> int:
    """Row offset of the first item on `page` (1-based)."""
    return (max(page, 1) - 1) * page_size


class CategoryPage(BaseModel):
    """Response for GET /categories/{slug}."""

    apps: list[EntrySummary]
    total: int
    total_pages: int
    current_page: int
    term: Category


class SearchPage(BaseModel):
    """Response for GET /search."""

    apps: list[EntrySummary]
    total: int
    total_pages: int
    current_page: int


class TagPage(BaseModel):
    """Response for GET /tags/{tag_id}/apps."""

    data: list[TaggedEntry]
    tag: Tag
    pagination: Pagination


class TagListPage(BaseModel):
    """Response for GET /tags."""

    data: list[Tag]
    pagination: Pagination


class EntryListPage(BaseModel):
    """Response for GET /admin/apps (includes download targets and status)."""

    data: list[CatalogEntry]
    pagination: Pagination
