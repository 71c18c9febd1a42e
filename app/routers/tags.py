# =============================================================================
# app/routers/tags.py - Tag Endpoints
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Path, Query

from app.dependencies import CatalogServiceDep, LocaleDep
from core.models.catalog import TagListPage, TagPage

router = APIRouter()


@router.get("", response_model=TagListPage)
async def list_tags(
    service: CatalogServiceDep,
    page: Annotated[int, Query(ge=1, description="Page number")] = 1,
    page_size: Annotated[int | None, Query(ge=1, le=100, description="Items per page")] = None,
):
    """List tags, newest first."""
    return service.list_tags(page=page, page_size=page_size)


@router.get("/{tag_id}/apps", response_model=TagPage)
async def list_tag_apps(
    tag_id: Annotated[int, Path(ge=1, description="Tag id")],
    service: CatalogServiceDep,
    locale: LocaleDep,
    page: Annotated[int, Query(ge=1, description="Page number")] = 1,
    page_size: Annotated[int | None, Query(ge=1, le=100, description="Items per page")] = None,
    refresh: Annotated[bool, Query(description="Bypass the cache")] = False,
):
    """
    List apps carrying a tag.

    Each app includes the tag name in the requested locale.
    """
    return service.list_by_tag(tag_id, locale, page=page, page_size=page_size, refresh=refresh)
