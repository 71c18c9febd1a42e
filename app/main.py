# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the AppShelf API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   poetry run uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.exceptions import (
    AppShelfException,
    appshelf_exception_handler,
    validation_exception_handler,
)
from app.routers import admin, apps, cache, categories, downloads, health, search, tags
from app.auth import routes as auth_routes

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Logs the effective configuration on startup and shutdown.
    """
    logger.info(f"Starting AppShelf API in {settings.ENVIRONMENT} mode")
    logger.info(
        f"Storage: {settings.STORAGE_BACKEND}, cache: {settings.CACHE_BACKEND}, "
        f"download cost: {settings.DOWNLOAD_COST}, token TTL: {settings.DOWNLOAD_TOKEN_TTL_SECONDS}s"
    )

    yield

    logger.info("Shutting down AppShelf API")


# Create FastAPI application
app = FastAPI(
    title="AppShelf API",
    description="""
## Software Directory API

Browse, search and download catalogued applications in Chinese and English.

### Downloads

Downloads cost credits. A signed-in user asks for a **grant**; the API
checks and debits their balance and returns a short-lived token. Sending
the browser to the token's redeem URL redirects it to the real file.

```bash
# 1. Request a grant (Bearer session token required)
curl -X POST http://localhost:8000/api/v1/download/grant \\
  -H "Authorization: Bearer $TOKEN" \\
  -H "Content-Type: application/json" \\
  -d '{"entry_id": "2774"}'

# 2. Redeem within 5 minutes
curl -i http://localhost:8000/api/v1/download/redeem/<token>
```
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "Auth", "description": "Current user and session checks"},
        {"name": "Apps", "description": "Single app listings"},
        {"name": "Categories", "description": "Category listings"},
        {"name": "Search", "description": "Keyword search"},
        {"name": "Tags", "description": "Tag listings"},
        {"name": "Downloads", "description": "Credit-charged download grants"},
        {"name": "Admin", "description": "Listing management"},
        {"name": "Cache", "description": "Manual cache busting"},
        {"name": "Health", "description": "API health and readiness checks"},
    ],
)


# =============================================================================
# Middleware
# =============================================================================

# CORS middleware - allows cross-origin requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(AppShelfException)
async def handle_appshelf_exception(request: Request, exc: AppShelfException):
    """Handle custom AppShelf exceptions."""
    return await appshelf_exception_handler(request, exc)


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError):
    """Handle malformed request bodies and parameters."""
    return await validation_exception_handler(request, exc)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

app.include_router(auth_routes.router, prefix="/api/v1/auth", tags=["Auth"])
app.include_router(health.router, prefix="/api/v1", tags=["Health"])
app.include_router(apps.router, prefix="/api/v1/apps", tags=["Apps"])
app.include_router(categories.router, prefix="/api/v1/categories", tags=["Categories"])
app.include_router(search.router, prefix="/api/v1", tags=["Search"])
app.include_router(tags.router, prefix="/api/v1/tags", tags=["Tags"])
app.include_router(downloads.router, prefix="/api/v1/download", tags=["Downloads"])
app.include_router(admin.router, prefix="/api/v1/admin", tags=["Admin"])
app.include_router(cache.router, prefix="/api/v1/cache", tags=["Cache"])


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "AppShelf API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/v1/health",
    }
