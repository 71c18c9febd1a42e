# =============================================================================
# tests/test_credit_ledger.py - Credit Ledger Tests
# =============================================================================

import threading
from unittest.mock import patch

import pytest

from lib.credit_ledger import MemoryCreditLedger, SupabaseCreditLedger


class TestMemoryCreditLedger:

    def test_unknown_subject_has_zero(self):
        assert MemoryCreditLedger().get_balance("nobody") == 0

    def test_credit_and_debit(self):
        ledger = MemoryCreditLedger()
        assert ledger.credit("u1", 10) == 10

        assert ledger.debit("u1", 3, "download:1") is True
        assert ledger.get_balance("u1") == 7
        assert ledger.transactions[-1].delta == -3
        assert ledger.transactions[-1].reason == "download:1"

    def test_debit_is_conditional(self):
        ledger = MemoryCreditLedger({"u1": 2})

        assert ledger.debit("u1", 3, "download:1") is False
        assert ledger.get_balance("u1") == 2
        assert ledger.transactions == []

    def test_debit_exact_balance(self):
        ledger = MemoryCreditLedger({"u1": 1})
        assert ledger.debit("u1", 1, "download:1") is True
        assert ledger.get_balance("u1") == 0

    def test_negative_amounts_rejected(self):
        ledger = MemoryCreditLedger()
        with pytest.raises(ValueError):
            ledger.debit("u1", -1, "x")
        with pytest.raises(ValueError):
            ledger.credit("u1", -1)

    def test_concurrent_debits_never_overspend(self):
        ledger = MemoryCreditLedger({"u1": 10})
        results = []
        barrier = threading.Barrier(25)

        def worker():
            barrier.wait()
            results.append(ledger.debit("u1", 1, "download:1"))

        threads = [threading.Thread(target=worker) for _ in range(25)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results.count(True) == 10
        assert ledger.get_balance("u1") == 0


class TestSupabaseCreditLedger:

    @patch("lib.credit_ledger.SupabaseClient")
    def test_get_balance(self, mock_client):
        mock_client.fetch_credit_balance.return_value = 42

        assert SupabaseCreditLedger().get_balance("u1") == 42
        mock_client.fetch_credit_balance.assert_called_once_with("u1")

    @patch("lib.credit_ledger.SupabaseClient")
    def test_debit_delegates_to_rpc(self, mock_client):
        mock_client.debit_credits.return_value = False

        assert SupabaseCreditLedger().debit("u1", 1, "download:9") is False
        mock_client.debit_credits.assert_called_once_with("u1", 1, "download:9")
