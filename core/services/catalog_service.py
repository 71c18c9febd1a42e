# =============================================================================
# core/services/catalog_service.py - Catalog Query Layer
# =============================================================================
# Builds the paginated, localized catalog reads used by the public API and
# the admin list, with a cache in front of the store.
#
# Cache keys (one namespace per read):
#   app:{locale}:{appid}                       365 days
#   category:{locale}:{slug}:{page}            3 days
#   search:{locale}:{keyword}:{page}:{limit}   7 days
#   taglist:{page}:{page_size}                 7 days
#   tag:{locale}:{tag_id}:{page}:{page_size}   7 days
#   apptags:{appid}                            70 days
#
# Admin writes clear every cached read of the written locale.
# =============================================================================

import logging
from typing import Any

from app.exceptions import CategoryNotFoundError, EntryNotFoundError, TagNotFoundError
from core.models.catalog import (
    CatalogEntry,
    CategoryPage,
    EntryCreate,
    EntryListPage,
    EntryUpdate,
    Pagination,
    SearchPage,
    Tag,
    TaggedEntry,
    TagListPage,
    TagPage,
    page_offset,
    total_pages,
)
from core.models.category import find_category, is_pseudo_slug
from core.models.locale import Locale
from lib.cache import Cache, DAY
from lib.catalog_store import CatalogStore

logger = logging.getLogger(__name__)

ENTRY_TTL = 365 * DAY
CATEGORY_TTL = 3 * DAY
SEARCH_TTL = 7 * DAY
TAG_TTL = 7 * DAY
ENTRY_TAGS_TTL = 70 * DAY


class CatalogService:
    """
    Read and write catalog entries.

    Public listings only include published entries; the admin list and
    single-entry lookups include drafts.
    """

    def __init__(self, store: CatalogStore, cache: Cache, page_size: int = 20):
        self.store = store
        self.cache = cache
        self.page_size = page_size

    # -------------------------------------------------------------------------
    # Single entry
    # -------------------------------------------------------------------------

    def get_entry(self, appid: int, locale: Locale, refresh: bool = False) -> CatalogEntry:
        """
        Get one entry.

        Args:
            appid: App id
            locale: Listing language
            refresh: Skip the cached copy and reload it from the store

        Raises:
            EntryNotFoundError: If the app doesn't exist in this locale
        """
        key = f"app:{locale.value}:{appid}"

        if not refresh:
            cached = self.cache.get(key)
            if cached is not None:
                return CatalogEntry.model_validate(cached)

        entry = self.store.get_entry(appid, locale)
        if entry is None:
            raise EntryNotFoundError(appid)

        self.cache.set(key, entry.model_dump(mode="json"), ENTRY_TTL)
        return entry

    def tags_for_entry(self, appid: int) -> list[Tag]:
        """Tags linked to an app (same for every locale)."""
        key = f"apptags:{appid}"

        cached = self.cache.get(key)
        if cached is not None:
            return [Tag.model_validate(t) for t in cached]

        tags = self.store.tags_for_entry(appid)
        self.cache.set(key, [t.model_dump() for t in tags], ENTRY_TAGS_TTL)
        return tags

    # -------------------------------------------------------------------------
    # Listings
    # -------------------------------------------------------------------------

    def list_by_category(self, slug: str, locale: Locale, page: int = 1) -> CategoryPage:
        """
        List published apps in a category, newest first.

        The pseudo-slugs "all" and "0" list the whole catalog.

        Raises:
            CategoryNotFoundError: If the slug is unknown
        """
        term = find_category(slug, locale)
        if term is None:
            raise CategoryNotFoundError(slug)

        key = f"category:{locale.value}:{slug}:{page}"
        cached = self.cache.get(key)
        if cached is not None:
            return CategoryPage.model_validate(cached)

        entries, total = self.store.query_entries(
            locale,
            category=None if is_pseudo_slug(slug) else term.term_id,
            offset=page_offset(page, self.page_size),
            limit=self.page_size,
        )

        result = CategoryPage(
            apps=[e.to_summary() for e in entries],
            total=total,
            total_pages=total_pages(total, self.page_size),
            current_page=page,
            term=term,
        )
        self.cache.set(key, result.model_dump(mode="json"), CATEGORY_TTL)
        return result

    def search(
        self,
        keyword: str,
        locale: Locale,
        page: int = 1,
        limit: int | None = None,
    ) -> SearchPage:
        """
        Keyword search over published apps.

        Matching falls back in three stages, stopping at the first that
        finds anything:
        1. keyword in title
        2. keyword in content
        3. any space-separated part of the keyword in title
        """
        limit = limit or self.page_size
        keyword = keyword.strip()

        if not keyword:
            return SearchPage(apps=[], total=0, total_pages=0, current_page=page)

        key = f"search:{locale.value}:{keyword.casefold()}:{page}:{limit}"
        cached = self.cache.get(key)
        if cached is not None:
            return SearchPage.model_validate(cached)

        offset = page_offset(page, limit)

        entries, total = self.store.query_entries(
            locale, title_terms=[keyword], offset=offset, limit=limit
        )

        if total == 0:
            entries, total = self.store.query_entries(
                locale, content_term=keyword, offset=offset, limit=limit
            )

        parts = keyword.split()
        if total == 0 and len(parts) > 1:
            entries, total = self.store.query_entries(
                locale, title_terms=parts, offset=offset, limit=limit
            )

        result = SearchPage(
            apps=[e.to_summary() for e in entries],
            total=total,
            total_pages=total_pages(total, limit),
            current_page=page,
        )
        self.cache.set(key, result.model_dump(mode="json"), SEARCH_TTL)
        logger.debug(f"Search '{keyword}' ({locale.value}) -> {total} hits")
        return result

    def list_tags(self, page: int = 1, page_size: int | None = None) -> TagListPage:
        """List tags, newest first."""
        page_size = page_size or self.page_size
        key = f"taglist:{page}:{page_size}"

        cached = self.cache.get(key)
        if cached is not None:
            return TagListPage.model_validate(cached)

        tags, total = self.store.list_tags(offset=page_offset(page, page_size), limit=page_size)
        result = TagListPage(data=tags, pagination=Pagination.build(page, page_size, total))
        self.cache.set(key, result.model_dump(mode="json"), TAG_TTL)
        return result

    def list_by_tag(
        self,
        tag_id: int,
        locale: Locale,
        page: int = 1,
        page_size: int | None = None,
        refresh: bool = False,
    ) -> TagPage:
        """
        List apps carrying a tag, highest app id first.

        Raises:
            TagNotFoundError: If the tag doesn't exist
        """
        page_size = page_size or self.page_size
        key = f"tag:{locale.value}:{tag_id}:{page}:{page_size}"

        if not refresh:
            cached = self.cache.get(key)
            if cached is not None:
                return TagPage.model_validate(cached)

        tag = self.store.get_tag(tag_id)
        if tag is None:
            raise TagNotFoundError(tag_id)

        entries, total = self.store.entries_for_tag(
            tag_id, locale, offset=page_offset(page, page_size), limit=page_size
        )
        tag_name = tag.display_name(locale)

        result = TagPage(
            data=[TaggedEntry(**e.to_summary().model_dump(), tag_name=tag_name) for e in entries],
            tag=tag,
            pagination=Pagination.build(page, page_size, total),
        )
        self.cache.set(key, result.model_dump(mode="json"), TAG_TTL)
        return result

    # -------------------------------------------------------------------------
    # Admin
    # -------------------------------------------------------------------------

    def list_entries(
        self,
        locale: Locale,
        page: int = 1,
        page_size: int | None = None,
        keyword: str | None = None,
        category: int | None = None,
    ) -> EntryListPage:
        """Admin listing: every status, optional keyword/category filter, not cached."""
        page_size = page_size or self.page_size
        keyword = keyword.strip() if keyword else None

        entries, total = self.store.query_entries(
            locale,
            category=category,
            keyword=keyword or None,
            published_only=False,
            offset=page_offset(page, page_size),
            limit=page_size,
        )
        return EntryListPage(data=entries, pagination=Pagination.build(page, page_size, total))

    def create_entry(self, request: EntryCreate, appid: int | None = None) -> CatalogEntry:
        """Create an entry in the request's locale."""
        data: dict[str, Any] = request.model_dump(exclude={"locale"})
        if appid is not None:
            data["appid"] = appid

        entry = self.store.create_entry(request.locale, data)
        self.invalidate_locale(request.locale)
        return entry

    def update_entry(self, appid: int, locale: Locale, request: EntryUpdate) -> CatalogEntry:
        """
        Apply the fields set on `request` to an entry.

        Raises:
            EntryNotFoundError: If the app doesn't exist in this locale
        """
        changes = request.changes()
        if not changes:
            return self.get_entry(appid, locale, refresh=True)

        entry = self.store.update_entry(appid, locale, changes)
        if entry is None:
            raise EntryNotFoundError(appid)

        self.invalidate_locale(locale)
        return entry

    # -------------------------------------------------------------------------
    # Cache
    # -------------------------------------------------------------------------

    def invalidate_locale(self, locale: Locale) -> int:
        """Drop every cached read for one locale. Returns keys removed."""
        removed = sum(
            self.cache.clear(f"{namespace}:{locale.value}:")
            for namespace in ("app", "category", "search", "tag")
        )
        logger.info(f"Invalidated {removed} cached {locale.value} reads")
        return removed
