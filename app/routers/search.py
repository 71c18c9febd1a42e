# =============================================================================
# app/routers/search.py - Keyword Search Endpoint
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Query

from app.dependencies import CatalogServiceDep, LocaleDep
from core.models.catalog import SearchPage

router = APIRouter()


@router.get("/search", response_model=SearchPage)
async def search_apps(
    service: CatalogServiceDep,
    locale: LocaleDep,
    keyword: Annotated[str, Query(max_length=100, description="Search text")] = "",
    page: Annotated[int, Query(ge=1, description="Page number")] = 1,
    limit: Annotated[int | None, Query(ge=1, le=100, description="Items per page")] = None,
):
    """
    Search published apps.

    Titles are matched first; if nothing matches, content is searched; if
    that fails too and the keyword has several words, any word may match
    the title. An empty keyword returns an empty page.
    """
    return service.search(keyword, locale, page=page, limit=limit)
