# =============================================================================
# lib/credit_ledger.py - Credit Ledger Adapters
# =============================================================================
# Credits are the platform's spend unit. The download flow only needs two
# operations:
#
#   get_balance(subject_id) -> int
#   debit(subject_id, amount, reason) -> bool
#
# debit() is a conditional decrement: it applies only if the balance covers
# the amount, and the check and the write happen as one atomic step. Two
# concurrent debits can therefore never take the balance below zero.
# =============================================================================

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Protocol

from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)


class CreditLedger(Protocol):
    def get_balance(self, subject_id: str) -> int: ...

    def debit(self, subject_id: str, amount: int, reason: str) -> bool: ...


@dataclass
class LedgerEntry:
    """One balance change, kept by the in-memory ledger."""
    subject_id: str
    delta: int
    reason: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class MemoryCreditLedger:
    """Lock-guarded ledger for development and tests."""

    def __init__(self, balances: dict[str, int] | None = None):
        self._balances: dict[str, int] = dict(balances or {})
        self._lock = threading.Lock()
        self.transactions: list[LedgerEntry] = []

    def get_balance(self, subject_id: str) -> int:
        with self._lock:
            return self._balances.get(subject_id, 0)

    def credit(self, subject_id: str, amount: int, reason: str = "top-up") -> int:
        """Add credits. Returns the new balance."""
        if amount < 0:
            raise ValueError("amount must be >= 0")
        with self._lock:
            self._balances[subject_id] = self._balances.get(subject_id, 0) + amount
            self.transactions.append(LedgerEntry(subject_id, amount, reason))
            return self._balances[subject_id]

    def debit(self, subject_id: str, amount: int, reason: str) -> bool:
        if amount < 0:
            raise ValueError("amount must be >= 0")
        with self._lock:
            balance = self._balances.get(subject_id, 0)
            if balance < amount:
                return False
            self._balances[subject_id] = balance - amount
            self.transactions.append(LedgerEntry(subject_id, -amount, reason))
        logger.info(f"Debited {amount} credits from {subject_id} ({reason})")
        return True


class SupabaseCreditLedger:
    """Ledger backed by the credit_balances table and the debit_credits RPC."""

    def get_balance(self, subject_id: str) -> int:
        return SupabaseClient.fetch_credit_balance(subject_id)

    def debit(self, subject_id: str, amount: int, reason: str) -> bool:
        applied = SupabaseClient.debit_credits(subject_id, amount, reason)
        if applied:
            logger.info(f"Debited {amount} credits from {subject_id} ({reason})")
        return applied
