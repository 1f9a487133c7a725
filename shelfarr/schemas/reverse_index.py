"""
Shelfarr v1.0.0 - Reverse Indexing Schemas
"""

from pydantic import BaseModel
from typing import Optional


class ScanResult(BaseModel):
    """Counts produced by one pass over the library folders"""

    total_folders: int = 0
    new_folders: int = 0
    queued_folders: int = 0
    auto_imported: int = 0
    errors: int = 0

    def merge(self, other: "ScanResult") -> None:
        self.total_folders += other.total_folders
        self.new_folders += other.new_folders
        self.queued_folders += other.queued_folders
        self.auto_imported += other.auto_imported
        self.errors += other.errors


class SeasonScanResult(BaseModel):
    """Summary returned by the season-scanning collaborator"""

    seasons_scanned: int = 0
    episodes_updated: int = 0
    episodes_marked_missing: int = 0
    errors: int = 0


class ReverseIndexResults(ScanResult):
    """Full scan summary"""

    season_scanning: Optional[SeasonScanResult] = None
    duration_ms: int = 0


class ReverseIndexResponse(BaseModel):
    """Response of a reverse indexing trigger"""

    success: bool
    message: str
    results: Optional[ReverseIndexResults] = None


class ReverseIndexStatus(BaseModel):
    is_running: bool
