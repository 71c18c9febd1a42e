# =============================================================================
# tests/test_catalog_service.py - Catalog Query Layer Tests
# =============================================================================
# Tests for CatalogService against the seeded in-memory store:
# - Category listings (published only, newest first, pseudo-slugs)
# - Search fallback stages
# - Tag listings
# - Caching and invalidation on admin writes
#
# Run with: poetry run pytest tests/test_catalog_service.py -v
# =============================================================================

import pytest

from app.exceptions import CategoryNotFoundError, EntryNotFoundError, TagNotFoundError
from core.models.catalog import EntryCreate, EntryStatus, EntryUpdate
from core.models.locale import Locale
from core.services.catalog_service import CatalogService


@pytest.fixture
def service(store, cache):
    return CatalogService(store, cache, page_size=20)


def _ids(page):
    return [app.appid for app in page.apps]


# =============================================================================
# Single Entry
# =============================================================================

class TestGetEntry:

    def test_found(self, service):
        entry = service.get_entry(1, Locale.EN)
        assert entry.content == "File archiver"

    def test_drafts_are_visible_by_id(self, service):
        assert service.get_entry(3, Locale.ZH).status == EntryStatus.DRAFT

    def test_missing(self, service):
        with pytest.raises(EntryNotFoundError) as exc_info:
            service.get_entry(99, Locale.ZH)
        assert exc_info.value.status_code == 404

    def test_missing_in_other_locale(self, service):
        with pytest.raises(EntryNotFoundError):
            service.get_entry(5, Locale.EN)

    def test_cached_until_refresh(self, service, store):
        service.get_entry(1, Locale.ZH)
        store.update_entry(1, Locale.ZH, {"title": "7-Zip 24"})

        assert service.get_entry(1, Locale.ZH).title == "7-Zip"
        assert service.get_entry(1, Locale.ZH, refresh=True).title == "7-Zip 24"

    def test_tags_for_entry(self, service):
        assert [t.id for t in service.tags_for_entry(1)] == [1]
        assert service.tags_for_entry(4) == []


# =============================================================================
# Category Listings
# =============================================================================

class TestListByCategory:

    def test_published_only(self, service):
        page = service.list_by_category("code", Locale.ZH)

        assert _ids(page) == [2, 5]
        assert page.total == 2
        assert page.term.name == "编程软件"

    def test_all_lists_everything_newest_first(self, service):
        page = service.list_by_category("all", Locale.ZH)

        assert _ids(page) == [2, 4, 1, 5]
        assert page.term.slug == "all"

    def test_latest_pseudo_slug(self, service):
        page = service.list_by_category("0", Locale.EN)

        assert _ids(page) == [2, 1]
        assert page.term.name == "Latest Software"

    def test_pagination(self, store, cache):
        service = CatalogService(store, cache, page_size=2)

        page = service.list_by_category("all", Locale.ZH, page=2)

        assert _ids(page) == [1, 5]
        assert page.total == 4
        assert page.total_pages == 2
        assert page.current_page == 2

    def test_page_past_the_end(self, service):
        page = service.list_by_category("code", Locale.ZH, page=5)
        assert page.apps == []
        assert page.total == 2

    def test_unknown_slug(self, service):
        with pytest.raises(CategoryNotFoundError):
            service.list_by_category("nope", Locale.ZH)

    def test_summaries_hide_download_url(self, service):
        page = service.list_by_category("code", Locale.ZH)
        assert "download_url" not in page.model_dump()["apps"][0]


# =============================================================================
# Search
# =============================================================================

class TestSearch:

    def test_title_match(self, service):
        page = service.search("7-zip", Locale.ZH)
        assert _ids(page) == [1]

    def test_falls_back_to_content(self, service):
        page = service.search("editor", Locale.ZH)

        assert _ids(page) == [2, 5]
        assert page.total == 2

    def test_falls_back_to_any_word_in_title(self, service):
        page = service.search("python zip", Locale.ZH)
        assert _ids(page) == [1, 5]

    def test_title_match_stops_fallback(self, service):
        # "Python IDE" matches the title, so "python editor" content is not consulted
        page = service.search("python", Locale.ZH)
        assert _ids(page) == [5]

    def test_drafts_are_not_found(self, service):
        assert service.search("Draft", Locale.ZH).total == 0

    def test_blank_keyword(self, service, cache):
        page = service.search("   ", Locale.ZH)

        assert page.apps == []
        assert page.total == 0
        assert len(cache) == 0

    def test_locale_is_respected(self, service):
        assert service.search("archiver", Locale.EN).total == 1
        assert service.search("archiver", Locale.ZH).total == 0

    def test_results_are_cached(self, service, store, cache):
        service.search("editor", Locale.ZH)
        store.update_entry(5, Locale.ZH, {"content": "nothing"})

        assert service.search("Editor", Locale.ZH).total == 2


# =============================================================================
# Tags
# =============================================================================

class TestTags:

    def test_list_tags(self, service):
        page = service.list_tags()

        assert [t.id for t in page.data] == [3, 2, 1]
        assert page.pagination.total == 3

    def test_list_by_tag_localizes_name(self, service):
        zh = service.list_by_tag(2, Locale.ZH)
        en = service.list_by_tag(2, Locale.EN)

        assert [e.appid for e in zh.data] == [5, 2]
        assert {e.tag_name for e in zh.data} == {"编辑器"}
        assert [e.appid for e in en.data] == [2]
        assert en.data[0].tag_name == "Editor"

    def test_empty_tag(self, service):
        page = service.list_by_tag(3, Locale.ZH)

        assert page.data == []
        assert page.pagination.total == 0

    def test_unknown_tag(self, service):
        with pytest.raises(TagNotFoundError):
            service.list_by_tag(99, Locale.ZH)


# =============================================================================
# Admin Writes
# =============================================================================

class TestAdmin:

    def test_list_entries_includes_drafts(self, service):
        page = service.list_entries(Locale.ZH)

        assert page.pagination.total == 5
        assert any(e.status == EntryStatus.DRAFT for e in page.data)
        assert page.data[0].download_url is not None

    def test_list_entries_keyword(self, service):
        page = service.list_entries(Locale.ZH, keyword="editor")
        assert [e.appid for e in page.data] == [2, 5]

    def test_create_invalidates_listings(self, service):
        before = service.list_by_category("code", Locale.ZH)

        created = service.create_entry(EntryCreate(
            title="Sublime Text",
            category=5,
            download_url="https://cdn.example.com/subl.exe",
        ))
        after = service.list_by_category("code", Locale.ZH)

        assert created.appid == 6
        assert after.total == before.total + 1
        assert _ids(after)[0] == 6

    def test_create_with_explicit_id(self, service):
        created = service.create_entry(
            EntryCreate(title="Python IDE", download_url="https://cdn.example.com/en/pyide.exe", locale="en"),
            appid=5,
        )

        assert created.appid == 5
        assert service.get_entry(5, Locale.EN).title == "Python IDE"

    def test_update_invalidates_entry(self, service):
        service.get_entry(2, Locale.ZH)

        service.update_entry(2, Locale.ZH, EntryUpdate(title="VS Code"))

        assert service.get_entry(2, Locale.ZH).title == "VS Code"

    def test_update_only_touches_that_locale(self, service, cache):
        service.get_entry(2, Locale.EN)
        service.update_entry(2, Locale.ZH, EntryUpdate(title="VS Code"))

        assert cache.get("app:en:2") is not None
        assert cache.get("app:zh:2") is None

    def test_unpublish_hides_from_listings(self, service):
        service.update_entry(2, Locale.ZH, EntryUpdate(status=EntryStatus.DRAFT))
        assert _ids(service.list_by_category("code", Locale.ZH)) == [5]

    def test_update_missing(self, service):
        with pytest.raises(EntryNotFoundError):
            service.update_entry(99, Locale.ZH, EntryUpdate(title="x"))

    def test_empty_update_returns_current(self, service):
        assert service.update_entry(1, Locale.ZH, EntryUpdate()).title == "7-Zip"
