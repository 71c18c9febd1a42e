# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.DOWNLOAD_COST)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
#
# The Settings class validates all values at startup, catching configuration
# errors early rather than at runtime.
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings are accessed via the global `settings` instance, or via
    `get_settings()` when injected as a FastAPI dependency.
    """

    # -------------------------------------------------------------------------
    # Supabase Configuration
    # -------------------------------------------------------------------------
    # Catalog tables and the credit ledger live in Supabase (Postgres)

    SUPABASE_URL: str = Field(
        ...,
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_SERVICE_KEY: str = Field(
        ...,
        description="Supabase service_role key (bypasses RLS)"
    )

    SUPABASE_JWT_SECRET: str = Field(
        ...,
        description="Legacy HS256 secret used to verify user session JWTs"
    )

    # -------------------------------------------------------------------------
    # Backends
    # -------------------------------------------------------------------------

    STORAGE_BACKEND: Literal["supabase", "memory"] = Field(
        default="supabase",
        description="Where catalog entries and credit balances are stored"
    )

    CACHE_BACKEND: Literal["memory", "redis"] = Field(
        default="memory",
        description="Cache used for catalog reads and redeemed-token records"
    )

    REDIS_URL: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL (used when CACHE_BACKEND=redis)"
    )

    # -------------------------------------------------------------------------
    # Download Grants
    # -------------------------------------------------------------------------

    DOWNLOAD_TOKEN_SECRET: str = Field(
        ...,
        min_length=16,
        description="Shared secret for signing download grant tokens"
    )

    DOWNLOAD_COST: int = Field(
        default=1,
        ge=0,
        description="Credits charged for each issued download grant"
    )

    DOWNLOAD_TOKEN_TTL_SECONDS: int = Field(
        default=300,
        ge=1,
        le=86400,
        description="How long a download grant stays redeemable"
    )

    DOWNLOAD_TOKEN_SINGLE_USE: bool = Field(
        default=False,
        description="Reject a grant token after its first redemption"
    )

    # -------------------------------------------------------------------------
    # Catalog
    # -------------------------------------------------------------------------

    DEFAULT_LOCALE: Literal["zh", "en"] = Field(
        default="zh",
        description="Locale used when a request does not name a known one"
    )

    PAGE_SIZE: int = Field(
        default=20,
        ge=1,
        le=100,
        description="Default page size for catalog listings"
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Current environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging, auto-reload)"
    )

    API_HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server to"
    )

    API_PORT: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    # -------------------------------------------------------------------------
    # Security
    # -------------------------------------------------------------------------

    # CORS origins (comma-separated string that gets parsed)
    CORS_ORIGINS: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )

    ADMIN_EMAILS: str = Field(
        default="",
        description="E-mail addresses allowed to manage listings (comma-separated)"
    )

    CACHE_ADMIN_SECRET: str | None = Field(
        default=None,
        description="Secret for POST /cache/clear; the endpoint is disabled when unset"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=True,
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Example: "http://localhost:3000, https://myapp.com" -> ["http://localhost:3000", "https://myapp.com"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def admin_emails_list(self) -> list[str]:
        """Lower-cased admin e-mails, empty entries dropped."""
        return [e.strip().lower() for e in self.ADMIN_EMAILS.split(",") if e.strip()]

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse .env and validate once,
    not on every access.

    Returns:
        Settings: The application settings instance
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
