# =============================================================================
# app/routers/admin.py - Listing Management Endpoints
# =============================================================================
# Minimal CRUD for catalog entries. All endpoints require an admin user
# (e-mail listed in ADMIN_EMAILS). Writes clear the cached public reads of
# the affected locale.
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query

from app.auth import AuthUser, require_admin
from app.dependencies import CatalogServiceDep, LocaleDep
from core.models.catalog import CatalogEntry, EntryCreate, EntryListPage, EntryUpdate

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/apps", response_model=EntryListPage)
async def admin_list_apps(
    service: CatalogServiceDep,
    locale: LocaleDep,
    admin: AuthUser = Depends(require_admin),
    page: Annotated[int, Query(ge=1, description="Page number")] = 1,
    page_size: Annotated[int | None, Query(ge=1, le=100, description="Items per page")] = None,
    keyword: Annotated[str | None, Query(max_length=100, description="Title or content contains")] = None,
    category: Annotated[int | None, Query(ge=0, description="Category term_id")] = None,
):
    """
    List apps of every status, including download URLs.
    """
    return service.list_entries(
        locale,
        page=page,
        page_size=page_size,
        keyword=keyword,
        category=category,
    )


@router.post("/apps", response_model=CatalogEntry, status_code=201)
async def admin_create_app(
    body: EntryCreate,
    service: CatalogServiceDep,
    admin: AuthUser = Depends(require_admin),
    appid: Annotated[int | None, Query(ge=1, description="Reuse an existing id (e.g. to add a translation)")] = None,
):
    """
    Create an app listing in `body.locale`.

    Omit `appid` to allocate a new id.
    """
    entry = service.create_entry(body, appid=appid)
    logger.info(f"Admin {admin.email} created app {entry.appid} ({body.locale.value})")
    return entry


@router.put("/apps/{appid}", response_model=CatalogEntry)
async def admin_update_app(
    appid: Annotated[int, Path(ge=1, description="App id")],
    body: EntryUpdate,
    service: CatalogServiceDep,
    locale: LocaleDep,
    admin: AuthUser = Depends(require_admin),
):
    """
    Update an app listing.

    Only the fields present in the body are changed.
    """
    entry = service.update_entry(appid, locale, body)
    logger.info(f"Admin {admin.email} updated app {appid} ({locale.value}): {sorted(body.changes())}")
    return entry
