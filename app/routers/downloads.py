# =============================================================================
# app/routers/downloads.py - Download Grant Endpoints
# =============================================================================
# POST /download/grant           signed-in users trade credits for a token
# GET  /download/redeem/{token}  anyone holding the token is redirected to
#                                the real download URL
#
# The token itself is the capability: redemption needs no session.
# =============================================================================

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Path, Request
from fastapi.responses import RedirectResponse

from app.auth import AuthUser, get_current_user_optional
from app.dependencies import DownloadServiceDep, SettingsDep
from core.models.download import GrantRequest, GrantResponse
from core.models.locale import resolve_locale

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/grant",
    response_model=GrantResponse,
    responses={
        401: {"description": "UNAUTHORIZED - no valid session"},
        402: {"description": "INSUFFICIENT_CREDIT - balance below the download cost"},
        404: {"description": "NOT_FOUND - unknown app or no download URL"},
    },
)
async def create_download_grant(
    body: GrantRequest,
    request: Request,
    service: DownloadServiceDep,
    settings: SettingsDep,
    user: Optional[AuthUser] = Depends(get_current_user_optional),
):
    """
    Issue a download grant.

    Charges the configured download cost and returns a token that is valid
    for a few minutes. Send the browser to `redeem_path` to start the
    download.
    """
    locale = resolve_locale(body.locale, settings.DEFAULT_LOCALE)
    token, grant = service.issue_grant(user, body.entry_id, locale)

    return GrantResponse(
        token=token,
        expires_at=grant.expires_at,
        redeem_path=request.url_for("redeem_download_grant", token=token).path,
    )


@router.get(
    "/redeem/{token}",
    name="redeem_download_grant",
    response_class=RedirectResponse,
    status_code=307,
    responses={403: {"description": "INVALID_OR_EXPIRED_TOKEN"}},
)
async def redeem_download_grant(
    token: Annotated[str, Path(min_length=1, max_length=4096, description="Grant token")],
    service: DownloadServiceDep,
):
    """
    Redeem a download grant.

    Redirects to the app's download URL, or returns 403 if the token is
    invalid or expired.
    """
    grant = service.redeem(token)

    return RedirectResponse(
        grant.download_url,
        status_code=307,
        headers={"Cache-Control": "no-store"},
    )
