# =============================================================================
# lib/download_token.py - Download Grant Token Codec
# =============================================================================
# Grant tokens are compact HS256 JWTs (python-jose). The JWT compact form is
# base64url segments joined by dots, so a token can travel as a URL path
# segment without escaping.
#
# Claims:
#   sub           subject (user) id
#   download_url  real asset URL the token redirects to
#   entry_id      app id the grant was issued for
#   jti           random token id (used for optional single-use tracking)
#   iat / exp     issue and expiry time, whole seconds since the epoch
#   aud           "download-grant", so session JWTs signed with another
#                 audience are never accepted here
# =============================================================================

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta, timezone

from jose import jwt, JWTError

from core.models.catalog import is_http_url
from core.models.download import DownloadGrant

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
AUDIENCE = "download-grant"


class GrantTokenError(Exception):
    """Token could not be verified. The message is for logs only."""


def new_grant(
    download_url: str,
    subject_id: str,
    entry_id: int | None,
    ttl_seconds: int,
    now: datetime | None = None,
) -> DownloadGrant:
    """
    Build a grant valid for `ttl_seconds` from `now`.

    Times are truncated to whole seconds so the token's exp claim and the
    returned expires_at are identical.
    """
    issued = (now or datetime.now(timezone.utc)).replace(microsecond=0)
    if issued.tzinfo is None:
        issued = issued.replace(tzinfo=timezone.utc)
    return DownloadGrant(
        download_url=download_url,
        subject_id=subject_id,
        entry_id=entry_id,
        token_id=uuid.uuid4().hex,
        issued_at=issued,
        expires_at=issued + timedelta(seconds=ttl_seconds),
    )


def encode_grant(grant: DownloadGrant, secret: str) -> str:
    """Sign a grant into a URL-safe token."""
    claims = {
        "sub": grant.subject_id,
        "download_url": grant.download_url,
        "entry_id": grant.entry_id,
        "jti": grant.token_id,
        "iat": int(grant.issued_at.timestamp()),
        "exp": int(grant.expires_at.timestamp()),
        "aud": AUDIENCE,
    }
    return jwt.encode(claims, secret, algorithm=ALGORITHM)


def decode_grant(token: str, secret: str) -> DownloadGrant:
    """
    Verify a token and return its grant.

    Raises:
        GrantTokenError: bad signature, wrong audience, expired, or
            a payload that doesn't describe a grant
    """
    try:
        claims = jwt.decode(token, secret, algorithms=[ALGORITHM], audience=AUDIENCE)
    except JWTError as e:
        raise GrantTokenError(str(e)) from e

    subject_id = claims.get("sub")
    download_url = claims.get("download_url")
    exp = claims.get("exp")
    iat = claims.get("iat", exp)

    if not isinstance(subject_id, str) or not subject_id:
        raise GrantTokenError("missing subject")
    if not isinstance(download_url, str) or not is_http_url(download_url):
        raise GrantTokenError("missing or malformed download_url")
    if not isinstance(exp, int) or not isinstance(iat, int):
        raise GrantTokenError("missing expiry")

    entry_id = claims.get("entry_id")
    return DownloadGrant(
        download_url=download_url,
        subject_id=subject_id,
        entry_id=entry_id if isinstance(entry_id, int) else None,
        token_id=claims.get("jti") if isinstance(claims.get("jti"), str) else None,
        issued_at=datetime.fromtimestamp(iat, tz=timezone.utc),
        expires_at=datetime.fromtimestamp(exp, tz=timezone.utc),
    )
