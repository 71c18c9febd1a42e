# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the catalog and download logic:
# - models/: Pydantic schemas for data validation
# - services/: Query layer and download authorization
#
# Routers call services; services talk to stores and the cache in lib/.
# =============================================================================
