# =============================================================================
# lib/ - Standalone Infrastructure Modules
# =============================================================================
# This package contains reusable building blocks:
# - supabase_client.py: Typed Supabase wrapper for database operations
# - catalog_store.py: Catalog persistence (Supabase and in-memory)
# - credit_ledger.py: Credit balance and conditional debit adapters
# - cache.py: Key/value cache with expiry (memory and Redis)
# - download_token.py: Signed download grant tokens
#
# These modules can be tested in isolation.
# =============================================================================
