# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends().
#
# Backends are chosen by STORAGE_BACKEND / CACHE_BACKEND and created once per
# process. Tests swap them through app.dependency_overrides.
# =============================================================================

import logging
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Query

from app.config import Settings, get_settings
from core.models.locale import Locale, resolve_locale
from core.services.catalog_service import CatalogService
from core.services.download_service import DownloadService
from lib.cache import Cache, MemoryCache, RedisCache
from lib.catalog_store import CatalogStore, MemoryCatalogStore, SupabaseCatalogStore
from lib.credit_ledger import CreditLedger, MemoryCreditLedger, SupabaseCreditLedger

logger = logging.getLogger(__name__)


@lru_cache
def get_catalog_store() -> CatalogStore:
    """Catalog store singleton for the configured backend."""
    if get_settings().STORAGE_BACKEND == "memory":
        logger.info("Using in-memory catalog store")
        return MemoryCatalogStore()
    return SupabaseCatalogStore()


@lru_cache
def get_credit_ledger() -> CreditLedger:
    """Credit ledger singleton for the configured backend."""
    if get_settings().STORAGE_BACKEND == "memory":
        logger.info("Using in-memory credit ledger")
        return MemoryCreditLedger()
    return SupabaseCreditLedger()


@lru_cache
def get_cache() -> Cache:
    """Cache singleton for the configured backend."""
    settings = get_settings()
    if settings.CACHE_BACKEND == "redis":
        return RedisCache.from_url(settings.REDIS_URL)
    return MemoryCache()


SettingsDep = Annotated[Settings, Depends(get_settings)]
CatalogStoreDep = Annotated[CatalogStore, Depends(get_catalog_store)]
CreditLedgerDep = Annotated[CreditLedger, Depends(get_credit_ledger)]
CacheDep = Annotated[Cache, Depends(get_cache)]


def get_catalog_service(
    store: CatalogStoreDep,
    cache: CacheDep,
    settings: SettingsDep,
) -> CatalogService:
    return CatalogService(store, cache, page_size=settings.PAGE_SIZE)


def get_download_service(
    store: CatalogStoreDep,
    ledger: CreditLedgerDep,
    cache: CacheDep,
    settings: SettingsDep,
) -> DownloadService:
    return DownloadService.from_settings(settings, store, ledger, cache)


def get_locale(
    settings: SettingsDep,
    locale: Annotated[str | None, Query(description="Listing language (zh or en)")] = None,
) -> Locale:
    """Resolve the ?locale= query parameter, falling back to DEFAULT_LOCALE."""
    return resolve_locale(locale, settings.DEFAULT_LOCALE)


# Type aliases for dependency injection
CatalogServiceDep = Annotated[CatalogService, Depends(get_catalog_service)]
DownloadServiceDep = Annotated[DownloadService, Depends(get_download_service)]
LocaleDep = Annotated[Locale, Depends(get_locale)]
