# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
# Every error carries a machine-readable code and, where useful, a hint
# telling the caller how to recover.
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse


class AppShelfException(Exception):
    """
    Base exception for the AppShelf API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "APPSHELF_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Auth Exceptions
# =============================================================================

class UnauthorizedError(AppShelfException):
    """Raised when a request has no valid user session."""

    def __init__(self, reason: str = "Authentication required"):
        super().__init__(
            message=reason,
            code="UNAUTHORIZED",
            status_code=401,
            suggestion="Sign in and retry with a valid Bearer token",
        )


class ForbiddenError(AppShelfException):
    """Raised when an authenticated user lacks admin rights."""

    def __init__(self):
        super().__init__(
            message="Admin access required",
            code="FORBIDDEN",
            status_code=403,
            suggestion="Ask an administrator to add your e-mail to ADMIN_EMAILS",
        )


# =============================================================================
# Catalog Exceptions
# =============================================================================

class EntryNotFoundError(AppShelfException):
    """Raised when an app id doesn't exist or has no download target."""

    def __init__(self, entry_id: int | str, reason: str = "App not found"):
        super().__init__(
            message=f"{reason}: {entry_id}",
            code="NOT_FOUND",
            status_code=404,
            suggestion="Check that the app id is correct",
            details={"entry_id": str(entry_id)},
        )


class CategoryNotFoundError(AppShelfException):
    """Raised when a category slug is unknown."""

    def __init__(self, slug: str):
        super().__init__(
            message=f"Category not found: {slug}",
            code="CATEGORY_NOT_FOUND",
            status_code=404,
            suggestion="Use GET /categories to list valid slugs",
            details={"slug": slug},
        )


class TagNotFoundError(AppShelfException):
    """Raised when a tag id doesn't exist."""

    def __init__(self, tag_id: int):
        super().__init__(
            message=f"Tag not found: {tag_id}",
            code="TAG_NOT_FOUND",
            status_code=404,
            suggestion="Use GET /tags to list valid tag ids",
            details={"tag_id": tag_id},
        )


# =============================================================================
# Download Exceptions
# =============================================================================

class InsufficientCreditError(AppShelfException):
    """Raised when a user cannot pay for a download grant."""

    def __init__(self, balance: int, cost: int):
        super().__init__(
            message="Not enough credits",
            code="INSUFFICIENT_CREDIT",
            status_code=402,
            suggestion="Top up your credits and request the download again",
            details={"balance": balance, "cost": cost},
        )


class InvalidOrExpiredTokenError(AppShelfException):
    """
    Raised for any download token verification failure.

    The cause (bad signature, malformed payload, expiry) is deliberately
    not part of the response.
    """

    def __init__(self):
        super().__init__(
            message="Invalid or expired download link",
            code="INVALID_OR_EXPIRED_TOKEN",
            status_code=403,
            suggestion="Request a new download link",
        )


class CreditLedgerError(AppShelfException):
    """Raised when the credit ledger cannot be reached."""

    def __init__(self, error: str):
        super().__init__(
            message="Credit service unavailable",
            code="CREDIT_LEDGER_UNAVAILABLE",
            status_code=503,
            suggestion="Try again later or contact support if the issue persists",
            details={"error": error},
        )


# =============================================================================
# Cache Admin Exceptions
# =============================================================================

class CacheAdminAuthError(AppShelfException):
    """Raised when the cache admin secret is missing or wrong."""

    def __init__(self):
        super().__init__(
            message="Invalid cache admin secret",
            code="INVALID_CACHE_SECRET",
            status_code=401,
            suggestion="Send the configured CACHE_ADMIN_SECRET in the X-Cache-Secret header",
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def appshelf_exception_handler(
    request: Request,
    exc: AppShelfException
) -> JSONResponse:
    """
    Convert AppShelfException to JSON response.

    Returns structured error with:
    - detail: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers=headers,
    )


async def validation_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Handle request validation errors.

    Converts validation errors to user-friendly messages.
    """
    return JSONResponse(
        status_code=422,
        content={
            "detail": "Validation error",
            "code": "VALIDATION_ERROR",
            "errors": str(exc)
        }
    )
