"""
Shelfarr v1.0.0 - Services
Business logic and service layer
"""

from .organization_rules_service import OrganizationRulesService
from .file_organization_service import FileOrganizationService
from .external_apis import TMDbAPI, IGDBAPI, CatalogLookup
from .season_scanning_service import SeasonScanningService
from .reverse_indexing_service import ReverseIndexingService, ScanGuard, scan_guard

__all__ = [
    "OrganizationRulesService",
    "FileOrganizationService",
    "TMDbAPI",
    "IGDBAPI",
    "CatalogLookup",
    "SeasonScanningService",
    "ReverseIndexingService",
    "ScanGuard",
    "scan_guard",
]
