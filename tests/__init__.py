# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the AppShelf API:
# - test_models.py: Pydantic model validation, locales and categories
# - test_cache.py: Memory and Redis cache backends
# - test_credit_ledger.py: Conditional debits
# - test_download_token.py: Grant token signing and verification
# - test_download_service.py: Grant issuance and redemption rules
# - test_catalog_service.py: Listings, search fallback, caching
# - test_supabase_store.py: Supabase adapters against a mocked client
# - test_api.py: Integration tests for API endpoints
#
# Run tests with: poetry run pytest
# =============================================================================
