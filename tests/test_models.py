# =============================================================================
# tests/test_models.py - Pydantic Model Tests
# =============================================================================
# Unit tests for the catalog models to ensure:
# - Locale strings resolve predictably
# - Category maps match both locales
# - Admin payloads are validated
# - Public views never leak download URLs
#
# Run with: poetry run pytest tests/test_models.py -v
# =============================================================================

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from core.models import (
    CatalogEntry,
    EntryCreate,
    EntryStatus,
    EntryUpdate,
    GrantRequest,
    Locale,
    Pagination,
    Tag,
    find_category,
    list_categories,
    resolve_locale,
)
from core.models.catalog import page_offset, total_pages


# =============================================================================
# Locale Tests
# =============================================================================

class TestResolveLocale:
    """Tests for resolve_locale()."""

    @pytest.mark.parametrize("value,expected", [
        ("en", Locale.EN),
        ("EN", Locale.EN),
        ("en-US", Locale.EN),
        ("zh", Locale.ZH),
        ("zh_CN", Locale.ZH),
        (Locale.EN, Locale.EN),
    ])
    def test_known_values(self, value, expected):
        assert resolve_locale(value) == expected

    def test_unknown_falls_back_to_default(self):
        assert resolve_locale("fr") == Locale.ZH
        assert resolve_locale(None, "en") == Locale.EN
        assert resolve_locale("", Locale.EN) == Locale.EN

    def test_each_locale_has_its_own_table(self):
        assert Locale.ZH.table == "apps"
        assert Locale.EN.table == "appsen"


# =============================================================================
# Category Tests
# =============================================================================

class TestCategories:
    """Tests for the hard-coded category maps."""

    def test_same_slugs_in_both_locales(self):
        zh = [(c.term_id, c.slug) for c in list_categories(Locale.ZH)]
        en = [(c.term_id, c.slug) for c in list_categories(Locale.EN)]
        assert zh == en
        assert len(zh) == 12

    def test_localized_names(self):
        assert find_category("code", Locale.ZH).name == "编程软件"
        assert find_category("code", Locale.EN).name == "Programming"
        assert find_category("code", Locale.EN).term_id == 5

    def test_pseudo_slugs(self):
        all_en = find_category("all", Locale.EN)
        latest_zh = find_category("0", Locale.ZH)

        assert all_en.name == "All Software"
        assert all_en.term_id == 0
        assert latest_zh.name == "最新软件"

    def test_unknown_slug(self):
        assert find_category("nope", Locale.EN) is None


# =============================================================================
# Entry Tests
# =============================================================================

class TestCatalogEntry:
    """Tests for CatalogEntry."""

    def test_from_db_row_parses_iso_date(self):
        entry = CatalogEntry.from_db_row({
            "appid": 7,
            "title": "Foo",
            "content": "bar",
            "date": "2024-01-15T10:30:00Z",
            "category": 5,
            "status": 1,
        })

        assert entry.date == datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)
        assert entry.status == EntryStatus.PUBLISHED

    def test_summary_hides_download_url(self):
        entry = CatalogEntry(
            appid=1,
            title="Foo",
            date=datetime.now(timezone.utc),
            download_url="https://cdn.example.com/foo.exe",
        )

        summary = entry.to_summary().model_dump()

        assert "download_url" not in summary
        assert "status" not in summary
        assert summary["appid"] == 1

    def test_has_download_target(self):
        now = datetime.now(timezone.utc)
        assert CatalogEntry(appid=1, title="a", date=now, download_url="https://x.io/a").has_download_target
        assert not CatalogEntry(appid=1, title="a", date=now, download_url="   ").has_download_target
        assert not CatalogEntry(appid=1, title="a", date=now).has_download_target


class TestEntryCreate:
    """Tests for the admin create payload."""

    def test_valid(self):
        body = EntryCreate(title="Foo", download_url="https://cdn.example.com/foo.exe", locale="en")
        assert body.locale == Locale.EN
        assert body.status == EntryStatus.PUBLISHED
        assert body.category == 18

    def test_requires_http_download_url(self):
        with pytest.raises(ValidationError):
            EntryCreate(title="Foo", download_url="ftp://cdn.example.com/foo.exe")
        with pytest.raises(ValidationError):
            EntryCreate(title="Foo", download_url="not a url")

    def test_requires_title(self):
        with pytest.raises(ValidationError):
            EntryCreate(title="", download_url="https://cdn.example.com/foo.exe")


class TestEntryUpdate:
    def test_changes_only_include_set_fields(self):
        update = EntryUpdate(title="New", intro=None)
        assert update.changes() == {"title": "New", "intro": None}

    def test_rejects_bad_url(self):
        with pytest.raises(ValidationError):
            EntryUpdate(download_url="javascript:alert(1)")


class TestTag:
    def test_display_name(self):
        tag = Tag(id=1, name="压缩", enname="Compression")
        assert tag.display_name(Locale.ZH) == "压缩"
        assert tag.display_name(Locale.EN) == "Compression"


# =============================================================================
# Pagination Tests
# =============================================================================

class TestPagination:
    def test_total_pages(self):
        assert total_pages(0, 20) == 0
        assert total_pages(20, 20) == 1
        assert total_pages(21, 20) == 2

    def test_page_offset(self):
        assert page_offset(1, 20) == 0
        assert page_offset(3, 20) == 40
        assert page_offset(0, 20) == 0

    def test_build(self):
        assert Pagination.build(2, 10, 35).total_pages == 4


class TestGrantRequest:
    def test_numeric_entry_id_is_coerced(self):
        assert GrantRequest(entry_id=2774).entry_id == "2774"

    def test_locale_optional(self):
        assert GrantRequest(entry_id="1").locale is None
        assert GrantRequest(entry_id="1", locale="en").locale == Locale.EN
