# =============================================================================
# app/routers/cache.py - Cache Admin Endpoint
# =============================================================================
# Manual cache busting for operators, e.g. after editing rows directly in
# the database. Protected by a shared secret rather than a user session so
# it can be called from scripts.
#
#   curl -X POST -H "X-Cache-Secret: $SECRET" \
#     "http://localhost:8000/api/v1/cache/clear?category=code"
# =============================================================================

import logging
import secrets
from typing import Annotated

from fastapi import APIRouter, Header, Query

from app.dependencies import CacheDep, SettingsDep
from app.exceptions import CacheAdminAuthError
from core.models.locale import Locale

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/clear")
async def clear_cache(
    cache: CacheDep,
    settings: SettingsDep,
    x_cache_secret: Annotated[str | None, Header(description="CACHE_ADMIN_SECRET")] = None,
    prefix: Annotated[str | None, Query(max_length=200, description="Raw key prefix")] = None,
    category: Annotated[str | None, Query(max_length=50, description="Category slug")] = None,
    tag: Annotated[int | None, Query(ge=1, description="Tag id")] = None,
    app: Annotated[int | None, Query(ge=1, description="App id")] = None,
):
    """
    Clear cached catalog reads.

    With no filter every key is cleared. Filters combine: each one clears
    its own keys in both locales.
    """
    expected = settings.CACHE_ADMIN_SECRET
    if not expected or not x_cache_secret or not secrets.compare_digest(x_cache_secret, expected):
        raise CacheAdminAuthError()

    cleared = 0
    targeted = any(v is not None for v in (prefix, category, tag, app))

    if prefix is not None:
        cleared += cache.clear(prefix)

    for locale in Locale:
        if category is not None:
            cleared += cache.clear(f"category:{locale.value}:{category}:")
        if tag is not None:
            cleared += cache.clear(f"tag:{locale.value}:{tag}:")
        if app is not None:
            key = f"app:{locale.value}:{app}"
            if cache.get(key) is not None:
                cache.delete(key)
                cleared += 1

    if app is not None and cache.get(f"apptags:{app}") is not None:
        cache.delete(f"apptags:{app}")
        cleared += 1

    if not targeted:
        cleared = cache.clear()

    logger.info(
        f"Cache cleared: {cleared} keys "
        f"(prefix={prefix}, category={category}, tag={tag}, app={app})"
    )
    return {"success": True, "cleared": cleared}
