# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up test environment variables before any imports
# - Seeds an in-memory catalog, ledger and cache
# - Provides a TestClient wired to those in-memory backends
# =============================================================================

import os
import time
from datetime import datetime, timezone
from uuid import uuid4

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-session-secret-0123456789")
os.environ.setdefault("DOWNLOAD_TOKEN_SECRET", "test-download-secret-0123456789")
os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("CACHE_BACKEND", "memory")
os.environ.setdefault("ADMIN_EMAILS", "admin@example.com")
os.environ.setdefault("CACHE_ADMIN_SECRET", "test-cache-secret")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from app.auth.models import AuthUser
from app.config import settings
from core.models.catalog import CatalogEntry, EntryStatus, Tag
from core.models.locale import Locale
from lib.cache import MemoryCache
from lib.catalog_store import MemoryCatalogStore
from lib.credit_ledger import MemoryCreditLedger


def _entry(appid, title, content, category, date, url, status=EntryStatus.PUBLISHED):
    return CatalogEntry(
        appid=appid,
        title=title,
        content=content,
        category=category,
        date=datetime(*date, tzinfo=timezone.utc),
        download_url=url,
        status=status,
    )


# =============================================================================
# Backend Fixtures
# =============================================================================

@pytest.fixture
def store():
    """In-memory catalog with a handful of zh/en apps and tags."""
    catalog = MemoryCatalogStore()

    zh = [
        _entry(1, "7-Zip", "文件压缩工具", 7, (2024, 1, 1), "https://cdn.example.com/7z.exe"),
        _entry(2, "Visual Studio Code", "代码编辑器 editor", 5, (2024, 2, 1), "https://cdn.example.com/vscode.exe"),
        _entry(3, "Draft Tool", "未发布", 5, (2024, 3, 1), "https://cdn.example.com/draft.exe", EntryStatus.DRAFT),
        _entry(4, "No Link App", "没有下载地址", 8, (2024, 1, 15), None),
        _entry(5, "Python IDE", "python editor", 5, (2023, 12, 1), "https://cdn.example.com/pyide.exe"),
    ]
    en = [
        _entry(1, "7-Zip", "File archiver", 7, (2024, 1, 1), "https://cdn.example.com/en/7z.exe"),
        _entry(2, "Visual Studio Code", "Code editor", 5, (2024, 2, 1), "https://cdn.example.com/en/vscode.exe"),
    ]
    for entry in zh:
        catalog.add_entry(entry, Locale.ZH)
    for entry in en:
        catalog.add_entry(entry, Locale.EN)

    catalog.add_tag(Tag(id=1, name="压缩", enname="Compression"))
    catalog.add_tag(Tag(id=2, name="编辑器", enname="Editor"))
    catalog.add_tag(Tag(id=3, name="空", enname="Empty"))
    catalog.link(1, 1)
    catalog.link(2, 2)
    catalog.link(5, 2)

    return catalog


@pytest.fixture
def ledger():
    """Empty in-memory credit ledger."""
    return MemoryCreditLedger()


@pytest.fixture
def cache():
    """Fresh in-memory cache."""
    return MemoryCache()


# =============================================================================
# Auth Fixtures
# =============================================================================

def make_session_token(user_id: str, email: str | None = None, expires_in: int = 3600) -> str:
    """Sign a session JWT the way Supabase Auth does (HS256)."""
    now = int(time.time())
    claims = {
        "sub": user_id,
        "aud": "authenticated",
        "iat": now,
        "exp": now + expires_in,
        "role": "authenticated",
    }
    if email:
        claims["email"] = email
    return jwt.encode(claims, settings.SUPABASE_JWT_SECRET, algorithm="HS256")


@pytest.fixture
def user():
    """A signed-in, non-admin user."""
    return AuthUser(id=uuid4(), email="user@example.com")


@pytest.fixture
def auth_headers(user):
    return {"Authorization": f"Bearer {make_session_token(str(user.id), user.email)}"}


@pytest.fixture
def admin_headers():
    token = make_session_token(str(uuid4()), "admin@example.com")
    return {"Authorization": f"Bearer {token}"}


# =============================================================================
# App Fixtures
# =============================================================================

@pytest.fixture
def client(store, ledger, cache):
    """TestClient using the in-memory store, ledger and cache fixtures."""
    from app.dependencies import get_cache, get_catalog_store, get_credit_ledger
    from app.main import app

    app.dependency_overrides[get_catalog_store] = lambda: store
    app.dependency_overrides[get_credit_ledger] = lambda: ledger
    app.dependency_overrides[get_cache] = lambda: cache

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
