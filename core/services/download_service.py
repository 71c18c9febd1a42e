# =============================================================================
# core/services/download_service.py - Download Authorization
# =============================================================================
# Issues and redeems download grants.
#
# Issuance (POST /download/grant):
#   1. the caller must be signed in                  -> UnauthorizedError
#   2. balance must cover DOWNLOAD_COST              -> InsufficientCreditError
#   3. the app must have an http(s) download URL     -> EntryNotFoundError
#   4. conditional debit of DOWNLOAD_COST            -> InsufficientCreditError
#                                                       (lost a concurrent race)
#   5. sign a token that expires after the TTL
#
# Nothing is debited unless steps 1-3 pass, and no token is produced unless
# the debit succeeds.
#
# Redemption (GET /download/redeem/{token}) verifies the token and returns
# the grant; the router turns it into a redirect. Redemption never looks at
# the balance. Tokens stay redeemable until they expire unless single-use
# mode is enabled.
# =============================================================================

import logging
from datetime import datetime, timezone
from typing import Callable

from app.auth.models import AuthUser
from app.config import Settings
from app.exceptions import (
    CreditLedgerError,
    EntryNotFoundError,
    InsufficientCreditError,
    InvalidOrExpiredTokenError,
    UnauthorizedError,
)
from core.models.catalog import is_http_url
from core.models.download import DownloadGrant
from core.models.locale import Locale
from lib.cache import Cache
from lib.catalog_store import CatalogStore
from lib.credit_ledger import CreditLedger
from lib.download_token import GrantTokenError, decode_grant, encode_grant, new_grant

logger = logging.getLogger(__name__)

REDEEMED_PREFIX = "redeemed:"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ledger_call(operation: str, fn, *args):
    """
    Call a credit ledger method, turning any backend failure into
    CreditLedgerError (503).
    """
    try:
        return fn(*args)
    except Exception as e:
        logger.error(f"Credit ledger {operation} failed: {e}")
        raise CreditLedgerError(str(e)) from e


class DownloadService:
    """
    Download grant issuer and redeemer.

    Example:
        service = DownloadService(store, ledger, cache, secret="...")
        token, grant = service.issue_grant(user, "2774", Locale.ZH)
        grant = service.redeem(token)
        # -> redirect to grant.download_url
    """

    def __init__(
        self,
        store: CatalogStore,
        ledger: CreditLedger,
        cache: Cache,
        secret: str,
        cost: int = 1,
        ttl_seconds: int = 300,
        single_use: bool = False,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.ledger = ledger
        self.cache = cache
        self.secret = secret
        self.cost = cost
        self.ttl_seconds = ttl_seconds
        self.single_use = single_use
        self.clock = clock

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        store: CatalogStore,
        ledger: CreditLedger,
        cache: Cache,
    ) -> "DownloadService":
        return cls(
            store,
            ledger,
            cache,
            secret=settings.DOWNLOAD_TOKEN_SECRET,
            cost=settings.DOWNLOAD_COST,
            ttl_seconds=settings.DOWNLOAD_TOKEN_TTL_SECONDS,
            single_use=settings.DOWNLOAD_TOKEN_SINGLE_USE,
        )

    # -------------------------------------------------------------------------
    # Issuance
    # -------------------------------------------------------------------------

    def issue_grant(
        self,
        user: AuthUser | None,
        entry_id: str | int,
        locale: Locale = Locale.ZH,
    ) -> tuple[str, DownloadGrant]:
        """
        Charge the download cost and sign a grant for one app.

        Args:
            user: Authenticated user, or None for anonymous callers
            entry_id: App id (string or int)
            locale: Listing whose download URL is used

        Returns:
            Tuple of (token, grant)

        Raises:
            UnauthorizedError: If user is None
            InsufficientCreditError: If the balance doesn't cover the cost
            EntryNotFoundError: If the app is missing or has no download URL
            CreditLedgerError: If the ledger call fails
        """
        if user is None:
            raise UnauthorizedError()

        subject_id = str(user.id)

        balance = ledger_call("get_balance", self.ledger.get_balance, subject_id)
        if balance < self.cost:
            logger.info(f"Grant refused for {subject_id}: balance {balance} < cost {self.cost}")
            raise InsufficientCreditError(balance=balance, cost=self.cost)

        appid = self._parse_entry_id(entry_id)
        download_url = self.store.get_download_target(appid, locale)
        if not download_url or not is_http_url(download_url):
            if download_url:
                logger.warning(f"App {appid} has an unusable download URL: {download_url!r}")
            raise EntryNotFoundError(entry_id, reason="No download available for app")

        if self.cost > 0:
            debited = ledger_call(
                "debit", self.ledger.debit, subject_id, self.cost, f"download:{appid}"
            )
            if not debited:
                logger.warning(f"Debit rejected for {subject_id} after balance check")
                current = ledger_call("get_balance", self.ledger.get_balance, subject_id)
                raise InsufficientCreditError(balance=current, cost=self.cost)

        grant = new_grant(
            download_url=download_url,
            subject_id=subject_id,
            entry_id=appid,
            ttl_seconds=self.ttl_seconds,
            now=self.clock(),
        )
        token = encode_grant(grant, self.secret)

        logger.info(f"Issued download grant for app {appid} to {subject_id}, expires {grant.expires_at.isoformat()}")
        return token, grant

    @staticmethod
    def _parse_entry_id(entry_id: str | int) -> int:
        try:
            appid = int(str(entry_id).strip())
        except ValueError:
            raise EntryNotFoundError(entry_id)
        if appid <= 0:
            raise EntryNotFoundError(entry_id)
        return appid

    # -------------------------------------------------------------------------
    # Redemption
    # -------------------------------------------------------------------------

    def redeem(self, token: str) -> DownloadGrant:
        """
        Verify a grant token.

        Returns:
            The decoded grant

        Raises:
            InvalidOrExpiredTokenError: On any verification failure
        """
        try:
            grant = decode_grant(token, self.secret)
        except GrantTokenError as e:
            logger.warning(f"Rejected download token: {e}")
            raise InvalidOrExpiredTokenError()

        if self.single_use:
            self._mark_redeemed(grant)

        logger.info(f"Redeemed download grant for app {grant.entry_id} by {grant.subject_id}")
        return grant

    def _mark_redeemed(self, grant: DownloadGrant) -> None:
        if not grant.token_id:
            logger.warning("Rejected download token without jti in single-use mode")
            raise InvalidOrExpiredTokenError()

        remaining = (grant.expires_at - self.clock()).total_seconds()
        if not self.cache.add(f"{REDEEMED_PREFIX}{grant.token_id}", True, ttl=max(remaining, 1)):
            logger.warning(f"Rejected replayed download token {grant.token_id}")
            raise InvalidOrExpiredTokenError()
