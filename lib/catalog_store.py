# =============================================================================
# lib/catalog_store.py - Catalog Persistence
# =============================================================================
# Read/write access to the catalog tables. Two implementations share the
# CatalogStore protocol:
#
# - SupabaseCatalogStore: production store (tables apps, appsen, tags, app_tags)
# - MemoryCatalogStore:   dict-backed store for development and tests
#
# Stores are dumb: no caching, no HTTP errors. "Not found" is None.
# =============================================================================

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Any, Protocol

from core.models.catalog import CatalogEntry, EntryStatus, Tag
from core.models.locale import Locale
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)


class CatalogStore(Protocol):
    """Operations the services need from the catalog."""

    def get_entry(self, appid: int, locale: Locale) -> CatalogEntry | None: ...

    def query_entries(
        self,
        locale: Locale,
        category: int | None = None,
        title_terms: list[str] | None = None,
        content_term: str | None = None,
        keyword: str | None = None,
        published_only: bool = True,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[list[CatalogEntry], int]: ...

    def create_entry(self, locale: Locale, data: dict[str, Any]) -> CatalogEntry: ...

    def update_entry(self, appid: int, locale: Locale, data: dict[str, Any]) -> CatalogEntry | None: ...

    def get_tag(self, tag_id: int) -> Tag | None: ...

    def list_tags(self, offset: int = 0, limit: int = 20) -> tuple[list[Tag], int]: ...

    def tags_for_entry(self, appid: int) -> list[Tag]: ...

    def entries_for_tag(
        self,
        tag_id: int,
        locale: Locale,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[list[CatalogEntry], int]: ...

    def get_download_target(self, appid: int, locale: Locale) -> str | None: ...


def _newest_first(entry: CatalogEntry) -> tuple[datetime, int]:
    date = entry.date if entry.date.tzinfo else entry.date.replace(tzinfo=timezone.utc)
    return date, entry.appid


# =============================================================================
# In-Memory Store
# =============================================================================

class MemoryCatalogStore:
    """
    Catalog kept in process memory.

    Matching mirrors the SQL store: case-insensitive substring matches,
    newest first, and a total count computed before pagination.
    """

    def __init__(self):
        self._entries: dict[Locale, dict[int, CatalogEntry]] = {locale: {} for locale in Locale}
        self._tags: dict[int, Tag] = {}
        self._links: set[tuple[int, int]] = set()
        self._lock = threading.Lock()

    # -- seeding helpers ------------------------------------------------------

    def add_entry(self, entry: CatalogEntry, locale: Locale = Locale.ZH) -> CatalogEntry:
        with self._lock:
            self._entries[locale][entry.appid] = entry
        return entry

    def add_tag(self, tag: Tag) -> Tag:
        with self._lock:
            self._tags[tag.id] = tag
        return tag

    def link(self, appid: int, tag_id: int) -> None:
        with self._lock:
            self._links.add((appid, tag_id))

    # -- entries --------------------------------------------------------------

    def get_entry(self, appid: int, locale: Locale) -> CatalogEntry | None:
        return self._entries[locale].get(appid)

    def query_entries(
        self,
        locale: Locale,
        category: int | None = None,
        title_terms: list[str] | None = None,
        content_term: str | None = None,
        keyword: str | None = None,
        published_only: bool = True,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[list[CatalogEntry], int]:
        terms = [t.casefold() for t in (title_terms or []) if t.strip()]
        content = content_term.casefold() if content_term else None
        needle = keyword.casefold() if keyword else None

        def matches(entry: CatalogEntry) -> bool:
            if published_only and entry.status != EntryStatus.PUBLISHED:
                return False
            if category is not None and entry.category != category:
                return False
            title = entry.title.casefold()
            body = entry.content.casefold()
            if terms and not any(t in title for t in terms):
                return False
            if content and content not in body:
                return False
            if needle and needle not in title and needle not in body:
                return False
            return True

        hits = sorted(
            (e for e in self._entries[locale].values() if matches(e)),
            key=_newest_first,
            reverse=True,
        )
        return hits[offset:offset + limit], len(hits)

    def create_entry(self, locale: Locale, data: dict[str, Any]) -> CatalogEntry:
        with self._lock:
            appid = data.get("appid")
            if appid is None:
                known = [a for table in self._entries.values() for a in table]
                appid = max(known, default=0) + 1
            row = {**data, "appid": appid}
            row.setdefault("date", datetime.now(timezone.utc))
            entry = CatalogEntry.from_db_row(row)
            self._entries[locale][appid] = entry
        logger.info(f"Created app {appid} ({locale.value})")
        return entry

    def update_entry(self, appid: int, locale: Locale, data: dict[str, Any]) -> CatalogEntry | None:
        with self._lock:
            current = self._entries[locale].get(appid)
            if current is None:
                return None
            updated = current.model_copy(update=data)
            self._entries[locale][appid] = updated
        logger.info(f"Updated app {appid} ({locale.value})")
        return updated

    def get_download_target(self, appid: int, locale: Locale) -> str | None:
        entry = self.get_entry(appid, locale)
        if entry is None or not entry.has_download_target:
            return None
        return entry.download_url

    # -- tags -----------------------------------------------------------------

    def get_tag(self, tag_id: int) -> Tag | None:
        return self._tags.get(tag_id)

    def list_tags(self, offset: int = 0, limit: int = 20) -> tuple[list[Tag], int]:
        ordered = sorted(self._tags.values(), key=lambda t: t.id, reverse=True)
        return ordered[offset:offset + limit], len(ordered)

    def tags_for_entry(self, appid: int) -> list[Tag]:
        return [
            self._tags[tag_id]
            for app_id, tag_id in sorted(self._links)
            if app_id == appid and tag_id in self._tags
        ]

    def entries_for_tag(
        self,
        tag_id: int,
        locale: Locale,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[list[CatalogEntry], int]:
        table = self._entries[locale]
        ids = sorted((a for a, t in self._links if t == tag_id and a in table), reverse=True)
        return [table[a] for a in ids[offset:offset + limit]], len(ids)


# =============================================================================
# Supabase Store
# =============================================================================

class SupabaseCatalogStore:
    """Catalog backed by the Supabase tables."""

    def get_entry(self, appid: int, locale: Locale) -> CatalogEntry | None:
        row = SupabaseClient.fetch_app(locale.table, appid)
        return CatalogEntry.from_db_row(row) if row else None

    def query_entries(
        self,
        locale: Locale,
        category: int | None = None,
        title_terms: list[str] | None = None,
        content_term: str | None = None,
        keyword: str | None = None,
        published_only: bool = True,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[list[CatalogEntry], int]:
        rows, total = SupabaseClient.query_apps(
            locale.table,
            category=category,
            title_terms=title_terms,
            content_term=content_term,
            keyword=keyword,
            published_only=published_only,
            offset=offset,
            limit=limit,
        )
        return [CatalogEntry.from_db_row(r) for r in rows], total

    def create_entry(self, locale: Locale, data: dict[str, Any]) -> CatalogEntry:
        payload = {k: v for k, v in data.items() if v is not None}
        payload.setdefault("date", datetime.now(timezone.utc))
        payload["date"] = payload["date"].isoformat()
        return CatalogEntry.from_db_row(SupabaseClient.insert_app(locale.table, payload))

    def update_entry(self, appid: int, locale: Locale, data: dict[str, Any]) -> CatalogEntry | None:
        payload = dict(data)
        if isinstance(payload.get("date"), datetime):
            payload["date"] = payload["date"].isoformat()
        row = SupabaseClient.update_app(locale.table, appid, payload)
        return CatalogEntry.from_db_row(row) if row else None

    def get_download_target(self, appid: int, locale: Locale) -> str | None:
        entry = self.get_entry(appid, locale)
        if entry is None or not entry.has_download_target:
            return None
        return entry.download_url

    def get_tag(self, tag_id: int) -> Tag | None:
        row = SupabaseClient.fetch_tag(tag_id)
        return Tag(**row) if row else None

    def list_tags(self, offset: int = 0, limit: int = 20) -> tuple[list[Tag], int]:
        rows, total = SupabaseClient.fetch_tags(offset=offset, limit=limit)
        return [Tag(**r) for r in rows], total

    def tags_for_entry(self, appid: int) -> list[Tag]:
        return [Tag(**r) for r in SupabaseClient.fetch_tags_for_app(appid)]

    def entries_for_tag(
        self,
        tag_id: int,
        locale: Locale,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[list[CatalogEntry], int]:
        ids, total = SupabaseClient.fetch_app_ids_for_tag(tag_id, offset=offset, limit=limit)
        rows = {int(r["appid"]): r for r in SupabaseClient.fetch_apps_by_ids(locale.table, ids)}
        # Keep the link order; skip links to rows missing from this locale
        return [CatalogEntry.from_db_row(rows[a]) for a in ids if a in rows], total
