"""
Shelfarr v1.0.0 - Database Models
SQLAlchemy models
"""

from .enums import ContentType, OrganizeQueueStatus, RequestStatus, ACTIONABLE_QUEUE_STATUSES
from .content_request import ContentRequest
from .organization import OrganizationSettings, OrganizationRule, OrganizedFile
from .organize_queue import OrganizeQueueItem

__all__ = [
    "ContentType",
    "OrganizeQueueStatus",
    "RequestStatus",
    "ACTIONABLE_QUEUE_STATUSES",
    "ContentRequest",
    "OrganizationSettings",
    "OrganizationRule",
    "OrganizedFile",
    "OrganizeQueueItem",
]
