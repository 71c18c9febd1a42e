# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# Provides dependency injection for authentication.
#
# Sessions are Supabase Auth JWTs sent as "Authorization: Bearer <token>".
# Supports both:
# - ES256 (Supabase JWT signing keys) via JWKS
# - HS256 (legacy Supabase JWT secret) as fallback
#
# Usage:
#   from app.auth import get_current_user, AuthUser
#
#   @router.get("/protected")
#   async def protected(user: AuthUser = Depends(get_current_user)):
#       return {"user_id": user.id}
# =============================================================================

import logging
import time
from typing import Optional
from uuid import UUID

import httpx
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError, ExpiredSignatureError

from app.config import settings
from app.auth.models import AuthUser
from app.exceptions import ForbiddenError, UnauthorizedError

logger = logging.getLogger(__name__)

# HTTP Bearer token extractor; missing headers are reported as UnauthorizedError
security = HTTPBearer(auto_error=False)

SESSION_AUDIENCE = "authenticated"

# Cache for JWKS keys
_jwks_cache: dict = {}
_jwks_cache_time: float = 0
JWKS_CACHE_TTL = 3600  # 1 hour


def _get_jwks_url() -> str:
    """Get the JWKS URL from the Supabase project URL."""
    supabase_url = settings.SUPABASE_URL.rstrip('/')
    return f"{supabase_url}/auth/v1/.well-known/jwks.json"


def _fetch_jwks() -> dict:
    """Fetch JWKS from Supabase with caching."""
    global _jwks_cache, _jwks_cache_time

    current_time = time.time()

    if _jwks_cache and (current_time - _jwks_cache_time) < JWKS_CACHE_TTL:
        return _jwks_cache

    try:
        jwks_url = _get_jwks_url()
        response = httpx.get(jwks_url, timeout=10)
        response.raise_for_status()
        _jwks_cache = response.json()
        _jwks_cache_time = current_time
        logger.debug(f"Fetched JWKS from {jwks_url}")
        return _jwks_cache
    except httpx.HTTPError as e:
        logger.warning(f"Failed to fetch JWKS: {e}")
        # Stale keys are better than none
        if _jwks_cache:
            return _jwks_cache
        return {"keys": []}


def _get_signing_key(token: str) -> tuple[str | dict, str]:
    """
    Get the key and algorithm to verify a session token with.

    HS256 tokens use SUPABASE_JWT_SECRET; anything else is looked up in
    the project's JWKS by key id.
    """
    try:
        unverified_header = jwt.get_unverified_header(token)
    except JWTError:
        return settings.SUPABASE_JWT_SECRET, "HS256"

    alg = unverified_header.get("alg", "HS256")
    kid = unverified_header.get("kid")

    if alg == "HS256":
        return settings.SUPABASE_JWT_SECRET, "HS256"

    if kid:
        for key in _fetch_jwks().get("keys", []):
            if key.get("kid") == kid:
                return key, alg

    logger.warning(f"Could not find key for alg={alg}, kid={kid}, falling back to HS256")
    return settings.SUPABASE_JWT_SECRET, "HS256"


def decode_session_token(token: str) -> AuthUser:
    """
    Verify a session JWT and build the user it identifies.

    Raises:
        UnauthorizedError: If the token is invalid, expired, or has no
            usable subject
    """
    try:
        signing_key, algorithm = _get_signing_key(token)
        payload = jwt.decode(
            token,
            signing_key,
            algorithms=[algorithm],
            audience=SESSION_AUDIENCE,
        )
    except ExpiredSignatureError:
        logger.warning("Session token has expired")
        raise UnauthorizedError("Session has expired")
    except JWTError as e:
        logger.warning(f"Session token validation failed: {e}")
        raise UnauthorizedError("Invalid session token")

    user_id = payload.get("sub")
    if not user_id:
        logger.warning("Session token missing 'sub' claim")
        raise UnauthorizedError("Invalid session token: missing user ID")

    try:
        user_uuid = UUID(user_id)
    except (ValueError, TypeError):
        logger.warning(f"Invalid UUID in session token: {user_id}")
        raise UnauthorizedError("Invalid session token: malformed user ID")

    return AuthUser(id=user_uuid, email=payload.get("email"))


async def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[AuthUser]:
    """
    Get the current user, or None when no usable session is presented.

    Useful for endpoints that decide themselves how to treat anonymous
    callers (the download grant endpoint reports them as UNAUTHORIZED
    through its own error path).
    """
    if credentials is None:
        return None

    try:
        return decode_session_token(credentials.credentials)
    except UnauthorizedError:
        return None


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> AuthUser:
    """
    Extract and validate the user from the Bearer session token.

    Raises:
        UnauthorizedError: 401 if the header is missing or the token is
            invalid or expired
    """
    if credentials is None:
        raise UnauthorizedError()

    user = decode_session_token(credentials.credentials)
    logger.debug(f"Authenticated user: {user.id}")
    return user


async def require_admin(user: AuthUser = Depends(get_current_user)) -> AuthUser:
    """
    Require an authenticated admin.

    Raises:
        ForbiddenError: 403 if the user's e-mail isn't in ADMIN_EMAILS
    """
    if not user.email or user.email.lower() not in settings.admin_emails_list:
        logger.warning(f"Admin access denied for {user.id}")
        raise ForbiddenError()
    return user
