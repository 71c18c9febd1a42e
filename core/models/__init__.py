# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - locale.py: Locale enum and resolution
# - category.py: Hard-coded category maps
# - catalog.py: Entries, tags and paginated listings
# - download.py: Download grant request/response schemas
#
# These models define the "contract" between API and clients.
# =============================================================================

# -----------------------------------------------------------------------------
# Locale & Categories
# -----------------------------------------------------------------------------
from .locale import Locale, resolve_locale
from .category import (
    ALL_SLUG,
    LATEST_SLUG,
    Category,
    find_category,
    list_categories,
)

# -----------------------------------------------------------------------------
# Catalog Models
# -----------------------------------------------------------------------------
from .catalog import (
    CatalogEntry,
    CategoryPage,
    EntryCreate,
    EntryListPage,
    EntryStatus,
    EntrySummary,
    EntryUpdate,
    Pagination,
    SearchPage,
    Tag,
    TaggedEntry,
    TagListPage,
    TagPage,
)

# -----------------------------------------------------------------------------
# Download Models
# -----------------------------------------------------------------------------
from .download import DownloadGrant, GrantRequest, GrantResponse

__all__ = [
    # Locale & categories
    "Locale",
    "resolve_locale",
    "ALL_SLUG",
    "LATEST_SLUG",
    "Category",
    "find_category",
    "list_categories",
    # Catalog
    "CatalogEntry",
    "CategoryPage",
    "EntryCreate",
    "EntryListPage",
    "EntryStatus",
    "EntrySummary",
    "EntryUpdate",
    "Pagination",
    "SearchPage",
    "Tag",
    "TaggedEntry",
    "TagListPage",
    "TagPage",
    # Download
    "DownloadGrant",
    "GrantRequest",
    "GrantResponse",
]
