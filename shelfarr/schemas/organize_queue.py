"""
Shelfarr v1.0.0 - Organize Queue Schemas
"""

from pydantic import BaseModel, Field
from typing import Optional, List

from ..models.enums import ContentType, OrganizeQueueStatus


class OrganizeQueueItemResponse(BaseModel):
    """Schema for organize queue item response"""

    id: str
    folder_path: str
    content_type: ContentType
    detected_title: Optional[str] = None
    detected_year: Optional[int] = None
    detected_season: Optional[int] = None
    detected_episode: Optional[int] = None
    detected_platform: Optional[str] = None
    detected_quality: Optional[str] = None
    detected_format: Optional[str] = None
    detected_edition: Optional[str] = None
    selected_tmdb_id: Optional[str] = None
    selected_igdb_id: Optional[str] = None
    selected_title: Optional[str] = None
    selected_year: Optional[int] = None
    selected_platform: Optional[str] = None
    status: OrganizeQueueStatus
    error_message: Optional[str] = None
    created_at: Optional[float] = None
    updated_at: Optional[float] = None
    processed_at: Optional[float] = None

    class Config:
        from_attributes = True


class OrganizeQueueListResponse(BaseModel):
    """Page of queue items plus the total matching the filter"""

    items: List[OrganizeQueueItemResponse]
    total: int


class OrganizeQueueStats(BaseModel):
    """Queue counts; total only covers actionable items"""

    total: int = 0
    pending: int = 0
    processing: int = 0
    completed: int = 0
    failed: int = 0
    skipped: int = 0


class QueueItemSelections(BaseModel):
    """Fields confirmed by the user when processing a queue item"""

    selected_tmdb_id: Optional[str] = None
    selected_igdb_id: Optional[str] = None
    selected_title: Optional[str] = Field(None, min_length=1)
    selected_year: Optional[int] = Field(None, ge=1800, le=2200)
    selected_platform: Optional[str] = None


class ActionResult(BaseModel):
    """Result of a user-triggered action"""

    success: bool
    message: str
    error: Optional[str] = None
