"""
Shelfarr v1.0.0 - Organize Queue Model
Library folders waiting for a human decision
"""

from sqlalchemy import Column, String, Integer, Float, Text, Index
from ..database import Base
from .enums import OrganizeQueueStatus
import time
import uuid


class OrganizeQueueItem(Base):
    """
    Candidate content folder that could not be linked automatically
    """

    __tablename__ = "organize_queue"

    # Primary key
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))

    # One row per folder
    folder_path = Column(Text, nullable=False, unique=True)
    content_type = Column(String, nullable=False)

    # Detected from the folder name (and catalog enrichment)
    detected_title = Column(String)
    detected_year = Column(Integer)
    detected_season = Column(Integer)
    detected_episode = Column(Integer)
    detected_platform = Column(String)
    detected_quality = Column(String)
    detected_format = Column(String)
    detected_edition = Column(String)

    # Confirmed by the user
    selected_tmdb_id = Column(String)
    selected_igdb_id = Column(String)
    selected_title = Column(String)
    selected_year = Column(Integer)
    selected_platform = Column(String)

    # Status
    status = Column(String, nullable=False, default=OrganizeQueueStatus.PENDING.value)
    error_message = Column(Text)

    # Timestamps
    created_at = Column(Float, default=lambda: time.time())
    updated_at = Column(Float, default=lambda: time.time(), onupdate=time.time)
    processed_at = Column(Float)

    __table_args__ = (
        Index("idx_organize_queue_status", "status"),
        Index("idx_organize_queue_content_type", "content_type"),
    )

    def __repr__(self):
        return f"<OrganizeQueueItem(id={self.id}, folder={self.folder_path}, status={self.status})>"
