"""
Shelfarr v1.0.0 - Pydantic Schemas
Request/Response models for API validation
"""

from .organization import (
    FileMetadata,
    OrganizationContext,
    PathGenerationResult,
    OrganizationResult,
    ExtractionResult,
    OrganizationSettingsUpdate,
    OrganizationSettingsResponse,
    OrganizationRuleCreate,
    OrganizationRuleUpdate,
    OrganizationRuleResponse,
    PathPreviewRequest,
    OrganizeFileRequest,
)
from .organize_queue import (
    OrganizeQueueItemResponse,
    OrganizeQueueListResponse,
    OrganizeQueueStats,
    QueueItemSelections,
    ActionResult,
)
from .reverse_index import (
    ScanResult,
    SeasonScanResult,
    ReverseIndexResults,
    ReverseIndexResponse,
    ReverseIndexStatus,
)

__all__ = [
    "FileMetadata",
    "OrganizationContext",
    "PathGenerationResult",
    "OrganizationResult",
    "ExtractionResult",
    "OrganizationSettingsUpdate",
    "OrganizationSettingsResponse",
    "OrganizationRuleCreate",
    "OrganizationRuleUpdate",
    "OrganizationRuleResponse",
    "PathPreviewRequest",
    "OrganizeFileRequest",
    "OrganizeQueueItemResponse",
    "OrganizeQueueListResponse",
    "OrganizeQueueStats",
    "QueueItemSelections",
    "ActionResult",
    "ScanResult",
    "SeasonScanResult",
    "ReverseIndexResults",
    "ReverseIndexResponse",
    "ReverseIndexStatus",
]
