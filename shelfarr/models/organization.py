"""
Shelfarr v1.0.0 - Organization Models
Settings, naming rules and placed-file records
"""

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from ..database import Base
import time
import uuid


class OrganizationSettings(Base):
    """
    Persisted organization settings (single row).
    Created with defaults on first access.
    """

    __tablename__ = "organization_settings"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))

    # Paths
    library_path = Column(String, nullable=False, default="/library")
    movies_path = Column(String)  # Overrides {library_path}/movies
    tv_shows_path = Column(String)  # Overrides {library_path}/tv-shows
    games_path = Column(String)  # Overrides {library_path}/games

    # Behaviour
    organize_on_complete = Column(Boolean, nullable=False, default=True)  # Read by the download hand-off, not by this engine
    replace_existing_files = Column(Boolean, nullable=False, default=True)
    extract_archives = Column(Boolean, nullable=False, default=True)
    delete_after_extraction = Column(Boolean, nullable=False, default=True)
    enable_reverse_indexing = Column(Boolean, nullable=False, default=True)
    reverse_indexing_cron = Column(String, nullable=False, default="0 * * * *")

    # Timestamps
    created_at = Column(Float, default=lambda: time.time())
    updated_at = Column(Float, default=lambda: time.time(), onupdate=time.time)

    def __repr__(self):
        return f"<OrganizationSettings(library_path={self.library_path})>"


class OrganizationRule(Base):
    """
    Naming rule for one content type (optionally scoped to a game platform)
    """

    __tablename__ = "organization_rules"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))

    content_type = Column(String, nullable=False)  # 'MOVIE', 'TV_SHOW', 'GAME'
    platform = Column(String)  # Games only, NULL = any platform

    is_default = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)

    # Templates, e.g. "{title} ({year})"
    folder_name_pattern = Column(Text, nullable=False)
    file_name_pattern = Column(Text, nullable=False)
    season_folder_pattern = Column(Text)  # TV only, e.g. "Season {seasonNumber}"
    base_path = Column(String)  # Overrides the settings path for this rule

    # Timestamps
    created_at = Column(Float, default=lambda: time.time())
    updated_at = Column(Float, default=lambda: time.time(), onupdate=time.time)

    __table_args__ = (
        Index("idx_organization_rules_type", "content_type"),
        Index("idx_organization_rules_type_default", "content_type", "is_default"),
    )

    def __repr__(self):
        return f"<OrganizationRule(id={self.id}, type={self.content_type}, default={self.is_default})>"


class OrganizedFile(Base):
    """
    One physically placed (or discovered in place) library file
    """

    __tablename__ = "organized_files"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))

    # Paths
    original_path = Column(Text, nullable=False)
    organized_path = Column(Text, nullable=False)
    file_name = Column(String, nullable=False)
    file_size = Column(BigInteger)  # Bytes

    # Descriptor
    content_type = Column(String, nullable=False)
    title = Column(String, nullable=False)
    year = Column(Integer)
    season = Column(Integer)
    episode = Column(Integer)
    platform = Column(String)
    quality = Column(String)
    format = Column(String)
    edition = Column(String)

    # True when found on disk by a library scan rather than placed by us
    is_reverse_indexed = Column(Boolean, nullable=False, default=False)

    # Tracking record
    request_id = Column(String, ForeignKey("content_requests.id", ondelete="SET NULL"))

    # Timestamps
    organized_at = Column(Float, default=lambda: time.time())

    # Relationships
    request = relationship("ContentRequest", back_populates="organized_files")

    __table_args__ = (
        Index("idx_organized_files_organized_path", "organized_path"),
        Index("idx_organized_files_original_path", "original_path"),
        Index("idx_organized_files_request", "request_id"),
    )

    def __repr__(self):
        return f"<OrganizedFile(id={self.id}, path={self.organized_path})>"
