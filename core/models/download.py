# =============================================================================
# core/models/download.py - Download Grant Schemas
# =============================================================================
# A download grant is a short-lived capability that lets its holder be
# redirected to an app's real download URL. Grants are never persisted:
# everything needed to redeem one travels inside the signed token.
# =============================================================================

from datetime import datetime

from pydantic import BaseModel, Field

from .locale import Locale


class DownloadGrant(BaseModel):
    """
    Decoded contents of a grant token.

    Example:
        {
            "download_url": "https://cdn.example.com/7z2301-x64.exe",
            "subject_id": "550e8400-e29b-41d4-a716-446655440000",
            "entry_id": 2774,
            "token_id": "0f5c2f4c6b1e4e9c9c9a0c1d2e3f4a5b",
            "issued_at": "2024-01-15T10:30:00Z",
            "expires_at": "2024-01-15T10:35:00Z"
        }
    """

    download_url: str
    subject_id: str
    entry_id: int | None = None
    token_id: str | None = Field(default=None, description="Random id (JWT jti)")
    issued_at: datetime
    expires_at: datetime

    model_config = {"frozen": True}


class GrantRequest(BaseModel):
    """Body of POST /download/grant."""

    entry_id: str = Field(
        ...,
        min_length=1,
        max_length=20,
        examples=["2774"],
        description="Id of the app to download"
    )
    locale: Locale | None = Field(
        default=None,
        description="Listing language the download target is read from"
    )

    model_config = {
        "coerce_numbers_to_str": True,
        "json_schema_extra": {
            "examples": [
                {"entry_id": "2774"},
                {"entry_id": "2774", "locale": "en"},
            ]
        },
    }


class GrantResponse(BaseModel):
    """Response of POST /download/grant."""

    token: str = Field(..., description="Opaque token; redeem at GET /download/redeem/{token}")
    expires_at: datetime
    redeem_path: str = Field(..., description="Relative URL that redeems the token")
