# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - apps.py: Single app listing and its tags
# - categories.py: Category list and category listings
# - search.py: Keyword search
# - tags.py: Tag list and apps by tag
# - downloads.py: Download grant issuance and redemption
# - admin.py: Listing management (admins only)
# - cache.py: Manual cache clearing
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import apps
from . import categories
from . import search
from . import tags
from . import downloads
from . import admin
from . import cache

__all__ = [
    "health",
    "apps",
    "categories",
    "search",
    "tags",
    "downloads",
    "admin",
    "cache",
]
