"""
Shelfarr v1.0.0 - Content Request Model
Tracking record for content the system is (or was) pursuing.
The request layer owns the full lifecycle; the organizer reads and creates rows.
"""

from sqlalchemy import Column, String, Boolean, Integer, Float, Text, Index
from sqlalchemy.orm import relationship
from ..database import Base
from .enums import RequestStatus
import time
import uuid


class ContentRequest(Base):
    """
    Requested movie, TV show or game
    """

    __tablename__ = "content_requests"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))

    content_type = Column(String, nullable=False)
    title = Column(String, nullable=False)
    year = Column(Integer)
    season = Column(Integer)
    episode = Column(Integer)
    platform = Column(String)

    # Catalog identifiers
    tmdb_id = Column(Integer)
    imdb_id = Column(String)
    igdb_id = Column(Integer)
    genre = Column(Text)

    status = Column(String, nullable=False, default=RequestStatus.PENDING.value)
    is_ongoing = Column(Boolean, nullable=False, default=False)  # TV: keep looking for episodes
    found_indexer = Column(String)

    # Timestamps
    created_at = Column(Float, default=lambda: time.time())
    updated_at = Column(Float, default=lambda: time.time(), onupdate=time.time)
    completed_at = Column(Float)
    expires_at = Column(Float)

    # Relationships
    organized_files = relationship("OrganizedFile", back_populates="request")

    __table_args__ = (
        Index("idx_content_requests_type", "content_type"),
        Index("idx_content_requests_status", "status"),
        Index("idx_content_requests_created_at", "created_at"),
    )

    def __repr__(self):
        return f"<ContentRequest(id={self.id}, title={self.title}, status={self.status})>"
