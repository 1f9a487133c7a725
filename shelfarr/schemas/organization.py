"""
Shelfarr v1.0.0 - Organization Schemas
Descriptors, path results and settings/rule payloads
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List

from ..models.enums import ContentType


class FileMetadata(BaseModel):
    """
    Descriptor of a piece of content, as parsed from a name and/or
    enriched from a catalog lookup
    """

    title: str = "Unknown"
    year: Optional[int] = None
    season: Optional[int] = None
    episode: Optional[int] = None
    platform: Optional[str] = None
    quality: Optional[str] = None
    format: Optional[str] = None
    edition: Optional[str] = None

    # Catalog enrichment
    tmdb_id: Optional[str] = None
    imdb_id: Optional[str] = None
    igdb_id: Optional[str] = None
    genre: Optional[str] = None

    @property
    def has_title(self) -> bool:
        return bool(self.title and self.title.strip() and self.title != "Unknown")


class OrganizationContext(FileMetadata):
    """Descriptor plus the source file it applies to"""

    content_type: ContentType
    original_path: str
    file_name: str
    file_size: Optional[int] = None


class PathGenerationResult(BaseModel):
    """Destination computed for one file"""

    folder_path: str
    file_name: str
    full_path: str


class OrganizationResult(BaseModel):
    """Outcome of placing one file (or the files extracted from it)"""

    success: bool
    original_path: str
    organized_path: Optional[str] = None
    error: Optional[str] = None
    files_processed: Optional[int] = None
    extracted_files: Optional[List[str]] = None


class ExtractionResult(BaseModel):
    """Outcome of an archive extraction attempt"""

    success: bool
    extracted_files: Optional[List[str]] = None
    error: Optional[str] = None


# Settings


class OrganizationSettingsUpdate(BaseModel):
    """Schema for updating organization settings (all fields optional)"""

    library_path: Optional[str] = Field(None, min_length=1)
    movies_path: Optional[str] = None
    tv_shows_path: Optional[str] = None
    games_path: Optional[str] = None
    organize_on_complete: Optional[bool] = None
    replace_existing_files: Optional[bool] = None
    extract_archives: Optional[bool] = None
    delete_after_extraction: Optional[bool] = None
    enable_reverse_indexing: Optional[bool] = None
    reverse_indexing_cron: Optional[str] = None

    class Config:
        extra = "forbid"


class OrganizationSettingsResponse(BaseModel):
    """Schema for organization settings response"""

    id: str
    library_path: str
    movies_path: Optional[str] = None
    tv_shows_path: Optional[str] = None
    games_path: Optional[str] = None
    organize_on_complete: bool
    replace_existing_files: bool
    extract_archives: bool
    delete_after_extraction: bool
    enable_reverse_indexing: bool
    reverse_indexing_cron: str
    created_at: Optional[float] = None
    updated_at: Optional[float] = None

    class Config:
        from_attributes = True


# Rules


class OrganizationRuleCreate(BaseModel):
    """Schema for creating an organization rule"""

    content_type: ContentType
    is_default: bool = False
    is_active: bool = True
    folder_name_pattern: str = Field(..., min_length=1)
    file_name_pattern: str = Field(..., min_length=1)
    season_folder_pattern: Optional[str] = None
    base_path: Optional[str] = None
    platform: Optional[str] = None

    class Config:
        extra = "forbid"


class OrganizationRuleUpdate(BaseModel):
    """Schema for updating an organization rule (all fields optional)"""

    is_default: Optional[bool] = None
    is_active: Optional[bool] = None
    folder_name_pattern: Optional[str] = Field(None, min_length=1)
    file_name_pattern: Optional[str] = Field(None, min_length=1)
    season_folder_pattern: Optional[str] = None
    base_path: Optional[str] = None
    platform: Optional[str] = None

    class Config:
        extra = "forbid"


class OrganizationRuleResponse(BaseModel):
    """Schema for organization rule response"""

    id: str
    content_type: ContentType
    platform: Optional[str] = None
    is_default: bool
    is_active: bool
    folder_name_pattern: str
    file_name_pattern: str
    season_folder_pattern: Optional[str] = None
    base_path: Optional[str] = None
    created_at: Optional[float] = None
    updated_at: Optional[float] = None

    class Config:
        from_attributes = True


# Ad-hoc operations


class PathPreviewRequest(BaseModel):
    """Descriptor to preview a destination path for"""

    content_type: ContentType
    title: str = Field(..., min_length=1)
    year: Optional[int] = None
    season: Optional[int] = Field(None, ge=0)
    episode: Optional[int] = Field(None, ge=0)
    platform: Optional[str] = None
    quality: Optional[str] = None
    format: Optional[str] = None
    edition: Optional[str] = None
    file_name: str = "example.mkv"


class OrganizeFileRequest(BaseModel):
    """Manual request to organize one file"""

    path: str = Field(..., min_length=1)
    content_type: ContentType
    title: str = Field(..., min_length=1)
    year: Optional[int] = None
    season: Optional[int] = Field(None, ge=0)
    episode: Optional[int] = Field(None, ge=0)
    platform: Optional[str] = None
    quality: Optional[str] = None
    format: Optional[str] = None
    edition: Optional[str] = None
    request_id: Optional[str] = None

    @field_validator("path")
    @classmethod
    def strip_path(cls, v: str) -> str:
        return v.strip()
