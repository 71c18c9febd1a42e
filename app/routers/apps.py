# =============================================================================
# app/routers/apps.py - Public App Endpoints
# =============================================================================
# Read-only access to single catalog entries. Download URLs are never part
# of these responses; see app/routers/downloads.py.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Path, Query

from app.dependencies import CatalogServiceDep, LocaleDep
from core.models.catalog import EntrySummary, Tag

router = APIRouter()


@router.get("/{appid}", response_model=EntrySummary)
async def get_app(
    appid: Annotated[int, Path(ge=1, description="App id")],
    service: CatalogServiceDep,
    locale: LocaleDep,
    refresh: Annotated[bool, Query(description="Bypass the cache")] = False,
):
    """
    Get one app's listing.

    Returns 404 if the app doesn't exist in the requested locale.
    """
    return service.get_entry(appid, locale, refresh=refresh).to_summary()


@router.get("/{appid}/tags")
async def get_app_tags(
    appid: Annotated[int, Path(ge=1, description="App id")],
    service: CatalogServiceDep,
) -> dict[str, list[Tag]]:
    """
    List the tags attached to an app.

    Apps without tags return an empty list.
    """
    return {"data": service.tags_for_entry(appid)}
