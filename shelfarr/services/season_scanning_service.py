"""
Shelfarr v1.0.0 - Season Scanning Service
Reconcile the episodes recorded for TV show requests with the files on disk
"""

import logging
import time
from pathlib import Path
from typing import Optional, Set

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..models import ContentRequest, ContentType, OrganizedFile, RequestStatus
from ..schemas.reverse_index import SeasonScanResult
from ..utils.files import list_subdirectories, walk_files
from ..utils.media_names import derive_episode_info, is_media_file, is_season_folder
from .organization_rules_service import OrganizationRulesService, extract_metadata_from_file_name

logger = logging.getLogger(__name__)


def _show_folder(path: Path) -> Path:
    """Show folder of an episode file (skipping its season folder)"""
    parent = path.parent
    if is_season_folder(parent.name):
        return parent.parent
    return parent


class SeasonScanningService:
    """Episode coverage for ongoing and completed TV show requests"""

    def __init__(self, db: Session):
        self.db = db
        self.rules = OrganizationRulesService(db)

    def scan_all_seasons(self) -> SeasonScanResult:
        """Scan every TV request that is ongoing, downloading or completed"""
        results = SeasonScanResult()

        requests = (
            self.db.query(ContentRequest)
            .filter(
                ContentRequest.content_type == ContentType.TV_SHOW.value,
                or_(
                    ContentRequest.is_ongoing.is_(True),
                    ContentRequest.status.in_(
                        [RequestStatus.DOWNLOADING.value, RequestStatus.COMPLETED.value]
                    ),
                ),
            )
            .all()
        )

        for request in requests:
            try:
                request_results = self.scan_tv_show_request(request.id)
                results.seasons_scanned += request_results.seasons_scanned
                results.episodes_updated += request_results.episodes_updated
                results.episodes_marked_missing += request_results.episodes_marked_missing
            except Exception as e:
                logger.error(f"Season scan failed for '{request.title}' ({request.id}): {e}")
                self.db.rollback()
                results.errors += 1

        logger.info(
            f"Season scanning completed. Scanned {results.seasons_scanned} seasons, "
            f"updated {results.episodes_updated} episodes, "
            f"marked {results.episodes_marked_missing} episodes as missing"
        )
        return results

    def scan_tv_show_request(self, request_id: str) -> SeasonScanResult:
        """
        Reconcile one TV show request with its folder

        Recorded episode files that disappeared from disk are dropped;
        episode files on disk without a record are indexed.

        Args:
            request_id: Tracking record id

        Returns:
            SeasonScanResult for this request
        """
        results = SeasonScanResult()

        request = self.db.query(ContentRequest).filter(ContentRequest.id == request_id).first()
        if not request or request.content_type != ContentType.TV_SHOW.value:
            logger.warning(f"TV show request not found: {request_id}")
            return results

        records = self.db.query(OrganizedFile).filter(OrganizedFile.request_id == request.id).all()

        known_paths: Set[str] = set()
        show_folders: Set[Path] = set()

        for record in records:
            path = Path(record.organized_path)
            if path.exists():
                known_paths.add(str(path))
                show_folders.add(_show_folder(path))
            else:
                logger.info(f"Episode file missing for '{request.title}': {path}")
                self.db.delete(record)
                results.episodes_marked_missing += 1

        if not show_folders:
            folder = self._find_show_folder(request)
            if folder:
                show_folders.add(folder)

        seasons: Set[int] = set()
        for folder in show_folders:
            for file_path in walk_files(folder, is_media_file):
                metadata = extract_metadata_from_file_name(file_path.name, ContentType.TV_SHOW)
                metadata = derive_episode_info(file_path, metadata)
                if metadata.season is not None:
                    seasons.add(metadata.season)

                if str(file_path) in known_paths or metadata.episode is None:
                    continue

                self.db.add(
                    OrganizedFile(
                        original_path=str(file_path),
                        organized_path=str(file_path),
                        file_name=file_path.name,
                        file_size=file_path.stat().st_size,
                        content_type=ContentType.TV_SHOW.value,
                        title=request.title,
                        year=request.year,
                        season=metadata.season,
                        episode=metadata.episode,
                        quality=metadata.quality,
                        format=metadata.format,
                        edition=metadata.edition,
                        is_reverse_indexed=True,
                        request_id=request.id,
                        organized_at=time.time(),
                    )
                )
                known_paths.add(str(file_path))
                results.episodes_updated += 1

        results.seasons_scanned = len(seasons)
        self.db.commit()

        logger.debug(
            f"Scanned '{request.title}': {results.seasons_scanned} seasons, "
            f"{results.episodes_updated} new episodes, {results.episodes_marked_missing} missing"
        )
        return results

    def _find_show_folder(self, request: ContentRequest) -> Optional[Path]:
        """Library folder whose name starts with the request title"""
        library = self.rules.get_library_directory(ContentType.TV_SHOW)
        if not library.is_dir():
            return None

        title = (request.title or "").strip().lower()
        if not title:
            return None

        for folder in list_subdirectories(library):
            if folder.name.lower().startswith(title):
                return folder
        return None
