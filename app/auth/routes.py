# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# API endpoints for the signed-in user.
#
# Note: Actual signup/login is handled by Supabase Auth client-side.
# These routes are for getting user info after authentication.
# =============================================================================

import logging
from fastapi import APIRouter, Depends

from app.auth.dependencies import get_current_user
from app.auth.models import AuthUser, UserResponse
from app.config import settings
from app.dependencies import CreditLedgerDep
from core.services.download_service import ledger_call

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    ledger: CreditLedgerDep,
    user: AuthUser = Depends(get_current_user),
) -> UserResponse:
    """
    Get the current authenticated user with their credit balance.

    Raises:
        401: If not authenticated
        503: If the credit ledger is unavailable
    """
    return UserResponse(
        id=user.id,
        email=user.email,
        credits=ledger_call("get_balance", ledger.get_balance, str(user.id)),
        is_admin=bool(user.email) and user.email.lower() in settings.admin_emails_list,
    )


@router.get("/verify")
async def verify_token(
    user: AuthUser = Depends(get_current_user)
) -> dict:
    """
    Verify that the current token is valid.

    Useful for checking if a stored token is still valid.

    Raises:
        401: If token is invalid or expired
    """
    return {
        "valid": True,
        "user_id": str(user.id),
        "email": user.email
    }
