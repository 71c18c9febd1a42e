# =============================================================================
# app/routers/categories.py - Category Endpoints
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Path, Query

from app.dependencies import CatalogServiceDep, LocaleDep
from core.models.catalog import CategoryPage
from core.models.category import Category, list_categories

router = APIRouter()


@router.get("")
async def get_categories(locale: LocaleDep) -> dict[str, list[Category]]:
    """List all categories with names in the requested locale."""
    return {"data": list_categories(locale)}


@router.get("/{slug}", response_model=CategoryPage)
async def get_category_apps(
    slug: Annotated[str, Path(max_length=50, description="Category slug, 'all' or '0'")],
    service: CatalogServiceDep,
    locale: LocaleDep,
    page: Annotated[int, Query(ge=1, description="Page number")] = 1,
):
    """
    List published apps in a category, newest first.

    `all` lists every app; `0` lists the latest apps.
    """
    return service.list_by_category(slug, locale, page=page)
