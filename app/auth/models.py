# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for authentication data.
# =============================================================================

from pydantic import BaseModel
from uuid import UUID
from typing import Optional


class AuthUser(BaseModel):
    """
    Authenticated user extracted from the session JWT.

    This is the minimal user info available from the token itself,
    without querying the database.
    """
    id: UUID
    email: Optional[str] = None

    model_config = {"frozen": True}


class UserResponse(BaseModel):
    """Current user plus their spendable credits."""
    id: UUID
    email: Optional[str] = None
    credits: int = 0
    is_admin: bool = False
