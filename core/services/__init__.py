# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .catalog_service import CatalogService
from .download_service import DownloadService

__all__ = [
    "CatalogService",
    "DownloadService",
]
