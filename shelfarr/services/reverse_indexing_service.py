"""
Shelfarr v1.0.0 - Reverse Indexing Service
Walk the library, reconcile folders with tracking records and drive the
organize queue
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Set, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..exceptions import InvalidQueueItemStateError, QueueItemNotFoundError, ShelfarrError
from ..models import (
    ACTIONABLE_QUEUE_STATUSES,
    ContentRequest,
    ContentType,
    OrganizeQueueItem,
    OrganizeQueueStatus,
    OrganizedFile,
    RequestStatus,
)
from ..schemas.organization import FileMetadata, OrganizationContext
from ..schemas.organize_queue import ActionResult, OrganizeQueueStats, QueueItemSelections
from ..schemas.reverse_index import (
    ReverseIndexResponse,
    ReverseIndexResults,
    ReverseIndexStatus,
    ScanResult,
    SeasonScanResult,
)
from ..utils.files import has_files, list_subdirectories, remove_empty_directories, walk_files
from ..utils.media_names import (
    derive_episode_info,
    is_media_file,
    is_season_folder,
    parse_season_number,
    refine_from_folder_name,
)
from .auto_import import is_suitable_for_auto_import
from .external_apis import CatalogLookup
from .file_organization_service import FileOrganizationService
from .organization_rules_service import OrganizationRulesService, extract_metadata_from_file_name
from .season_scanning_service import SeasonScanningService

logger = logging.getLogger(__name__)

REQUEST_EXPIRY_SECONDS = 30 * 24 * 60 * 60
REVERSE_INDEX_SOURCE = "Reverse Index"

# FAILED items may be retried or given up on; COMPLETED and SKIPPED are final
PROCESSABLE_STATUSES = (OrganizeQueueStatus.PENDING, OrganizeQueueStatus.FAILED)
SKIPPABLE_STATUSES = (OrganizeQueueStatus.PENDING, OrganizeQueueStatus.FAILED)


class ScanGuard:
    """
    Process-wide "one scan at a time" flag

    try_begin_scan() never blocks: a trigger arriving while a scan runs
    gets False and becomes a no-op.
    """

    def __init__(self):
        self._lock = threading.Lock()

    def try_begin_scan(self) -> bool:
        return self._lock.acquire(blocking=False)

    def end_scan(self) -> None:
        self._lock.release()

    @property
    def is_running(self) -> bool:
        return self._lock.locked()


scan_guard = ScanGuard()


@dataclass
class ContentFolder:
    """A library folder holding one piece of content"""

    path: Path
    media_files: List[Path] = field(default_factory=list)
    season: Optional[int] = None  # Lowest season folder found under a TV show


class ReverseIndexingService:
    """Library scanner and organize queue"""

    def __init__(
        self,
        db: Session,
        catalog: Optional[CatalogLookup] = None,
        guard: Optional[ScanGuard] = None,
    ):
        self.db = db
        self.rules = OrganizationRulesService(db)
        self.files = FileOrganizationService(db)
        self.seasons = SeasonScanningService(db)
        self.catalog = catalog or CatalogLookup()
        self.guard = guard or scan_guard

    # Scan entry points

    async def run_reverse_indexing(self) -> Optional[ReverseIndexResults]:
        """Scheduled scan: honours enable_reverse_indexing and the scan guard"""
        if not self.rules.get_settings().enable_reverse_indexing:
            logger.debug("Reverse indexing is disabled")
            return None

        if not self.guard.try_begin_scan():
            logger.info("Reverse indexing already running, skipping...")
            return None

        try:
            logger.info("Starting reverse indexing...")
            results = await self._run_scan()
            logger.info(self._summary(results))

            season_errors = results.season_scanning.errors if results.season_scanning else 0
            if results.errors or season_errors:
                logger.warning(
                    f"Reverse indexing completed with {results.errors + season_errors} errors"
                )
            return results

        except Exception as e:
            logger.error(f"Error during reverse indexing: {e}")
            return None
        finally:
            self.guard.end_scan()

    async def trigger_reverse_indexing(self) -> ReverseIndexResponse:
        """On-demand scan (runs even when scheduled scans are disabled)"""
        if not self.guard.try_begin_scan():
            return ReverseIndexResponse(success=False, message="Reverse indexing is already running")

        try:
            results = await self._run_scan()
            return ReverseIndexResponse(success=True, message=self._summary(results), results=results)

        except Exception as e:
            logger.error(f"Error during manual reverse indexing: {e}")
            return ReverseIndexResponse(success=False, message=f"Reverse indexing failed: {e}")
        finally:
            self.guard.end_scan()

    def get_status(self) -> ReverseIndexStatus:
        return ReverseIndexStatus(is_running=self.guard.is_running)

    async def _run_scan(self) -> ReverseIndexResults:
        start = time.monotonic()

        results = await self.scan_library_directories()

        # Episode coverage for TV requests
        season_results: Optional[SeasonScanResult] = None
        logger.info("Running season scanning to update episode progress...")
        try:
            season_results = self.seasons.scan_all_seasons()
        except Exception as e:
            logger.error(f"Season scanning failed: {e}")
            self.db.rollback()

        return ReverseIndexResults(
            **results.model_dump(),
            season_scanning=season_results,
            duration_ms=int((time.monotonic() - start) * 1000),
        )

    @staticmethod
    def _summary(results: ReverseIndexResults) -> str:
        episodes = results.season_scanning.episodes_updated if results.season_scanning else 0
        return (
            f"Reverse indexing completed in {results.duration_ms}ms. "
            f"Found {results.total_folders} folders, processed {results.new_folders} new folders. "
            f"Updated {episodes} episodes."
        )

    # Library walk

    async def scan_library_directories(self) -> ScanResult:
        """Scan the library directory of every content type"""
        results = ScanResult()

        for content_type in ContentType:
            directory = self.rules.get_library_directory(content_type)
            try:
                results.merge(await self.scan_directory(directory, content_type))
            except Exception as e:
                logger.error(f"Error scanning {content_type.value} directory {directory}: {e}")
                self.db.rollback()
                results.errors += 1

        return results

    async def scan_directory(self, directory: Path, content_type: ContentType) -> ScanResult:
        """Reconcile every content folder of one library directory"""
        results = ScanResult()

        if not directory.is_dir():
            logger.debug(f"Directory does not exist: {directory}")
            return results

        logger.info(f"Scanning directory: {directory} for {content_type.value}")

        folders = self.find_content_folders(directory, content_type)
        results.total_folders = len(folders)

        for folder in folders:
            try:
                outcome = await self.process_folder(folder, content_type)
            except Exception as e:
                logger.warning(f"Error processing folder {folder.path} ({content_type.value}): {e}")
                self.db.rollback()
                results.errors += 1
                continue

            if outcome in ("linked", "auto_imported", "queued"):
                results.new_folders += 1
            if outcome == "auto_imported":
                results.auto_imported += 1
            elif outcome == "queued":
                results.queued_folders += 1

        return results

    def find_content_folders(self, directory: Path, content_type: ContentType) -> List[ContentFolder]:
        """
        Immediate subfolders that hold content

        A folder directly containing media files is a content folder. A TV
        show folder may instead hold season folders ("Season 1", "S02"):
        all of them are gathered and the lowest season number is kept.
        """
        content_type = ContentType(content_type)
        folders: List[ContentFolder] = []

        try:
            candidates = list_subdirectories(directory)
        except OSError as e:
            logger.error(f"Error reading directory {directory}: {e}")
            return folders

        for candidate in candidates:
            if has_files(candidate, is_media_file):
                folders.append(ContentFolder(candidate, walk_files(candidate, is_media_file)))
                continue

            if content_type != ContentType.TV_SHOW:
                continue

            season_dirs = [
                child
                for child in list_subdirectories(candidate)
                if is_season_folder(child.name) and has_files(child, is_media_file)
            ]
            if not season_dirs:
                continue

            media_files: List[Path] = []
            for season_dir in season_dirs:
                media_files.extend(walk_files(season_dir, is_media_file))

            numbers = [n for n in (parse_season_number(d.name) for d in season_dirs) if n is not None]
            folders.append(ContentFolder(candidate, media_files, min(numbers) if numbers else None))

        return folders

    def extract_folder_metadata(self, folder: ContentFolder, content_type: ContentType) -> FileMetadata:
        """Base extraction on the folder name plus folder naming heuristics"""
        metadata = extract_metadata_from_file_name(folder.path.name, content_type)
        refine_from_folder_name(folder.path.name, content_type, metadata)
        if folder.season is not None:
            metadata.season = folder.season
        return metadata

    async def process_folder(self, folder: ContentFolder, content_type: ContentType) -> str:
        """
        Reconcile one content folder

        Returns one of "linked" (open request completed), "existing"
        (already reconciled), "auto_imported", "queued" or "unchanged"
        (queue item left as it was).
        """
        content_type = ContentType(content_type)

        metadata = self.extract_folder_metadata(folder, content_type)
        metadata = await self.enhance_metadata(metadata, content_type)

        request = self.find_matching_request(metadata, content_type)

        if request and request.status == RequestStatus.COMPLETED.value:
            logger.debug(f"Folder already has matching request: {folder.path} -> {request.id}")
            return "existing"

        if request:
            request.status = RequestStatus.COMPLETED.value
            request.completed_at = time.time()
            request.updated_at = time.time()
            self.index_folder_files(folder, content_type, metadata, request.id)
            logger.info(f"Completed request {request.id} ('{request.title}') from library folder {folder.path}")
            return "linked"

        if is_suitable_for_auto_import(metadata, content_type):
            request = self.create_request_from_metadata(metadata, content_type)
            self.index_folder_files(folder, content_type, metadata, request.id)
            logger.info(f"Auto-imported '{metadata.title}' ({metadata.year}) from {folder.path}")
            return "auto_imported"

        if self.upsert_queue_item(str(folder.path), content_type, metadata):
            return "queued"
        return "unchanged"

    # Metadata

    async def enhance_metadata(self, metadata: FileMetadata, content_type: ContentType) -> FileMetadata:
        """
        Fill ids, genre and canonical title/year from the catalog

        Lookup failures are logged and the descriptor is returned as-is.
        """
        if not metadata.has_title:
            return metadata

        try:
            details = await self.catalog.best_match(content_type, metadata.title, metadata.year)
        except Exception as e:
            logger.warning(f"Catalog lookup failed for '{metadata.title}' ({content_type.value}): {e}")
            return metadata

        if not details:
            return metadata

        return self._apply_catalog_details(metadata, details)

    @staticmethod
    def _apply_catalog_details(metadata: FileMetadata, details: dict) -> FileMetadata:
        updates = {}
        if details.get("title"):
            updates["title"] = details["title"]
        if details.get("year"):
            updates["year"] = details["year"]
        if details.get("tmdb_id"):
            updates["tmdb_id"] = str(details["tmdb_id"])
        if details.get("imdb_id"):
            updates["imdb_id"] = details["imdb_id"]
        if details.get("igdb_id"):
            updates["igdb_id"] = str(details["igdb_id"])
        if details.get("genre"):
            genre = details["genre"]
            updates["genre"] = ", ".join(genre) if isinstance(genre, list) else genre
        if details.get("platforms") and not metadata.platform:
            updates["platform"] = details["platforms"][0]

        return metadata.model_copy(update=updates)

    def find_matching_request(
        self, metadata: FileMetadata, content_type: ContentType
    ) -> Optional[ContentRequest]:
        """Newest tracking record matching the descriptor"""
        if not metadata.has_title:
            return None

        content_type = ContentType(content_type)
        query = self.db.query(ContentRequest).filter(
            ContentRequest.content_type == content_type.value,
            func.lower(ContentRequest.title).contains(metadata.title.lower(), autoescape=True),
        )

        if metadata.year:
            query = query.filter(ContentRequest.year == metadata.year)

        if content_type == ContentType.TV_SHOW:
            if metadata.season is not None:
                query = query.filter(ContentRequest.season == metadata.season)
            if metadata.episode is not None:
                query = query.filter(ContentRequest.episode == metadata.episode)

        if content_type == ContentType.GAME and metadata.platform:
            query = query.filter(
                func.lower(ContentRequest.platform).contains(metadata.platform.lower(), autoescape=True)
            )

        return query.order_by(ContentRequest.created_at.desc()).first()

    def create_request_from_metadata(
        self, metadata: FileMetadata, content_type: ContentType
    ) -> ContentRequest:
        """
        Create a tracking record for content found on disk

        Movies and games are created COMPLETED. TV shows are created
        PENDING and ongoing so missing episodes keep being looked for,
        then their seasons are scanned.
        """
        content_type = ContentType(content_type)
        now = time.time()
        is_tv = content_type == ContentType.TV_SHOW

        request = ContentRequest(
            content_type=content_type.value,
            title=metadata.title or "Unknown",
            year=metadata.year,
            status=RequestStatus.PENDING.value if is_tv else RequestStatus.COMPLETED.value,
            is_ongoing=is_tv,
            imdb_id=metadata.imdb_id,
            genre=metadata.genre,
            found_indexer=REVERSE_INDEX_SOURCE,
            created_at=now,
            updated_at=now,
            completed_at=None if is_tv else now,
            expires_at=now + REQUEST_EXPIRY_SECONDS,
        )

        if metadata.tmdb_id and metadata.tmdb_id.isdigit():
            request.tmdb_id = int(metadata.tmdb_id)

        if is_tv:
            request.season = metadata.season
            request.episode = metadata.episode

        if content_type == ContentType.GAME:
            request.platform = metadata.platform
            if metadata.igdb_id and metadata.igdb_id.isdigit():
                request.igdb_id = int(metadata.igdb_id)

        self.db.add(request)
        self.db.commit()
        self.db.refresh(request)

        logger.info(f"Created request for reverse-indexed content: {request.title} (ID: {request.id})")

        if is_tv:
            try:
                self.seasons.scan_tv_show_request(request.id)
            except Exception as e:
                logger.warning(f"Failed to scan seasons for TV show '{request.title}': {e}")
                self.db.rollback()

        return request

    def index_folder_files(
        self,
        folder: ContentFolder,
        content_type: ContentType,
        metadata: FileMetadata,
        request_id: str,
    ) -> int:
        """Record the folder's media files in place as reverse-indexed files"""
        content_type = ContentType(content_type)
        indexed = 0

        for file_path in folder.media_files:
            if self.db.query(OrganizedFile).filter(OrganizedFile.organized_path == str(file_path)).first():
                continue

            season, episode = metadata.season, metadata.episode
            if content_type == ContentType.TV_SHOW:
                file_metadata = derive_episode_info(
                    file_path, extract_metadata_from_file_name(file_path.name, content_type)
                )
                season = file_metadata.season if file_metadata.season is not None else season
                episode = file_metadata.episode if file_metadata.episode is not None else episode

            self.db.add(
                OrganizedFile(
                    original_path=str(file_path),
                    organized_path=str(file_path),
                    file_name=file_path.name,
                    file_size=file_path.stat().st_size,
                    content_type=content_type.value,
                    title=metadata.title,
                    year=metadata.year,
                    season=season,
                    episode=episode,
                    platform=metadata.platform,
                    quality=metadata.quality,
                    format=metadata.format,
                    edition=metadata.edition,
                    is_reverse_indexed=True,
                    request_id=request_id,
                    organized_at=time.time(),
                )
            )
            indexed += 1

        self.db.commit()
        logger.debug(f"Indexed {indexed} files in {folder.path}")
        return indexed

    # Organize queue

    def upsert_queue_item(self, folder_path: str, content_type: ContentType, metadata: FileMetadata) -> bool:
        """
        Queue a folder for confirmation

        Returns True when the folder is newly pending. Pending and
        processing items are left alone, skipped items stay skipped,
        completed and failed items are reset with fresh detected metadata.
        """
        item = self.db.query(OrganizeQueueItem).filter(OrganizeQueueItem.folder_path == folder_path).first()

        if item is None:
            item = OrganizeQueueItem(
                folder_path=folder_path,
                content_type=ContentType(content_type).value,
                status=OrganizeQueueStatus.PENDING.value,
                created_at=time.time(),
                updated_at=time.time(),
            )
            self._set_detected(item, metadata)
            self.db.add(item)
            self.db.commit()
            logger.debug(f"Added folder to organize queue for manual processing: {folder_path}")
            return True

        if item.status in (OrganizeQueueStatus.COMPLETED.value, OrganizeQueueStatus.FAILED.value):
            item.status = OrganizeQueueStatus.PENDING.value
            item.processed_at = None
            item.error_message = None
            item.updated_at = time.time()
            self._set_detected(item, metadata)
            self.db.commit()
            logger.info(f"Re-queued item (no matching request found): {folder_path}")
            return True

        logger.debug(f"Folder already in organize queue with status {item.status}: {folder_path}")
        return False

    @staticmethod
    def _set_detected(item: OrganizeQueueItem, metadata: FileMetadata) -> None:
        item.detected_title = metadata.title
        item.detected_year = metadata.year
        item.detected_season = metadata.season
        item.detected_episode = metadata.episode
        item.detected_platform = metadata.platform
        item.detected_quality = metadata.quality
        item.detected_format = metadata.format
        item.detected_edition = metadata.edition

    def get_organize_queue(
        self,
        status: Optional[List[OrganizeQueueStatus]] = None,
        content_type: Optional[ContentType] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Tuple[List[OrganizeQueueItem], int]:
        """Page of queue items (actionable ones by default) and total count"""
        statuses = status or list(ACTIONABLE_QUEUE_STATUSES)
        query = self.db.query(OrganizeQueueItem).filter(
            OrganizeQueueItem.status.in_([OrganizeQueueStatus(s).value for s in statuses])
        )
        if content_type:
            query = query.filter(OrganizeQueueItem.content_type == ContentType(content_type).value)

        total = query.count()
        items = (
            query.order_by(OrganizeQueueItem.created_at.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return items, total

    def get_queue_item(self, item_id: str) -> OrganizeQueueItem:
        item = self.db.query(OrganizeQueueItem).filter(OrganizeQueueItem.id == item_id).first()
        if not item:
            raise QueueItemNotFoundError(item_id)
        return item

    @staticmethod
    def _require_status(
        item: OrganizeQueueItem, allowed: Tuple[OrganizeQueueStatus, ...], action: str
    ) -> None:
        if item.status not in {status.value for status in allowed}:
            raise InvalidQueueItemStateError(item.id, item.status, action)

    def get_organize_queue_stats(self) -> OrganizeQueueStats:
        counts = dict(
            self.db.query(OrganizeQueueItem.status, func.count(OrganizeQueueItem.id))
            .group_by(OrganizeQueueItem.status)
            .all()
        )
        stats = OrganizeQueueStats(
            pending=counts.get(OrganizeQueueStatus.PENDING.value, 0),
            processing=counts.get(OrganizeQueueStatus.PROCESSING.value, 0),
            completed=counts.get(OrganizeQueueStatus.COMPLETED.value, 0),
            failed=counts.get(OrganizeQueueStatus.FAILED.value, 0),
            skipped=counts.get(OrganizeQueueStatus.SKIPPED.value, 0),
        )
        stats.total = stats.pending + stats.processing + stats.failed
        return stats

    async def process_organize_queue_item(
        self, item_id: str, selections: Optional[QueueItemSelections] = None
    ) -> ActionResult:
        """
        Confirm a queue item: create its tracking record and move its files
        into the library layout

        Args:
            item_id: Queue item id
            selections: User overrides for title, year, platform, catalog ids

        Returns:
            ActionResult; failures mark the item FAILED. Items that are not
            PENDING or FAILED are rejected and left as they are
        """
        try:
            item = self.get_queue_item(item_id)
            self._require_status(item, PROCESSABLE_STATUSES, "processed")
        except QueueItemNotFoundError as e:
            return ActionResult(success=False, message=str(e), error=str(e))
        except InvalidQueueItemStateError as e:
            logger.warning(f"Rejected processing of queue item {item_id}: {e}")
            return ActionResult(success=False, message=str(e), error=e.reason)

        selections = selections or QueueItemSelections()
        content_type = ContentType(item.content_type)

        try:
            item.status = OrganizeQueueStatus.PROCESSING.value
            item.selected_tmdb_id = selections.selected_tmdb_id
            item.selected_igdb_id = selections.selected_igdb_id
            item.selected_title = selections.selected_title
            item.selected_year = selections.selected_year
            item.selected_platform = selections.selected_platform
            item.updated_at = time.time()
            self.db.commit()

            metadata = FileMetadata(
                title=selections.selected_title or item.detected_title or "Unknown",
                year=selections.selected_year or item.detected_year,
                season=item.detected_season,
                episode=item.detected_episode,
                platform=selections.selected_platform or item.detected_platform,
                quality=item.detected_quality,
                format=item.detected_format,
                edition=item.detected_edition,
                tmdb_id=selections.selected_tmdb_id,
                igdb_id=selections.selected_igdb_id,
            )
            metadata = await self._apply_selected_catalog_entry(metadata, content_type)

            request = self.create_request_from_metadata(metadata, content_type)
            self.reorganize_files_in_folder(item.folder_path, metadata, content_type, request.id)

            item.status = OrganizeQueueStatus.COMPLETED.value
            item.processed_at = time.time()
            item.error_message = None
            self.db.commit()

            logger.info(f"Processed organize queue item: {item.folder_path} -> Request ID: {request.id}")
            return ActionResult(success=True, message="Item processed successfully")

        except Exception as e:
            logger.error(
                f"Failed to process organize queue item {item_id} "
                f"({item.folder_path}, {content_type.value}, '{item.detected_title}'): {e}"
            )
            self.db.rollback()

            item = self.db.query(OrganizeQueueItem).filter(OrganizeQueueItem.id == item_id).first()
            if item:
                item.status = OrganizeQueueStatus.FAILED.value
                item.error_message = str(e)
                item.processed_at = time.time()
                self.db.commit()

            return ActionResult(success=False, message=str(e) or "Failed to process item", error=str(e))

    async def _apply_selected_catalog_entry(
        self, metadata: FileMetadata, content_type: ContentType
    ) -> FileMetadata:
        """Fill ids and genre from the catalog entry the user picked"""
        catalog_id = metadata.igdb_id if content_type == ContentType.GAME else metadata.tmdb_id
        if not catalog_id:
            return metadata

        try:
            details = await self.catalog.get_details(content_type, catalog_id)
        except Exception as e:
            logger.warning(f"Catalog details failed for {catalog_id} ({content_type.value}): {e}")
            return metadata

        if not details.success or not details.data:
            return metadata

        # The user's title and year win over the catalog's
        enriched = self._apply_catalog_details(metadata, details.data)
        if metadata.has_title:
            enriched.title = metadata.title
        enriched.year = metadata.year or enriched.year
        return enriched

    def skip_organize_queue_item(self, item_id: str) -> ActionResult:
        try:
            item = self.get_queue_item(item_id)
            self._require_status(item, SKIPPABLE_STATUSES, "skipped")
        except QueueItemNotFoundError as e:
            return ActionResult(success=False, message=str(e), error=str(e))
        except InvalidQueueItemStateError as e:
            logger.warning(f"Rejected skip of queue item {item_id}: {e}")
            return ActionResult(success=False, message=str(e), error=e.reason)

        item.status = OrganizeQueueStatus.SKIPPED.value
        item.processed_at = time.time()
        item.updated_at = time.time()
        self.db.commit()

        logger.info(f"Skipped organize queue item: {item.folder_path}")
        return ActionResult(success=True, message="Item skipped successfully")

    def delete_organize_queue_item(self, item_id: str) -> ActionResult:
        try:
            item = self.get_queue_item(item_id)
        except QueueItemNotFoundError as e:
            return ActionResult(success=False, message=str(e), error=str(e))

        self.db.delete(item)
        self.db.commit()

        logger.info(f"Deleted organize queue item: {item_id}")
        return ActionResult(success=True, message="Item deleted successfully")

    # Re-organization

    def reorganize_files_in_folder(
        self,
        folder_path: str,
        metadata: FileMetadata,
        content_type: ContentType,
        request_id: str,
    ) -> int:
        """
        Move every media file of a confirmed folder into the library layout

        TV files keep their own season/episode numbers (file name, season
        folder) and fall back to the queue item's. Files resolving to the
        same destination get " - partN" names instead of replacing each other.

        Returns:
            Number of files organized

        Raises:
            ShelfarrError: media files were found but none could be organized
        """
        content_type = ContentType(content_type)
        folder = Path(folder_path)

        if not folder.is_dir():
            logger.warning(f"Folder does not exist, skipping reorganization: {folder}")
            return 0

        media_files = walk_files(folder, is_media_file)
        if not media_files:
            logger.warning(f"No media files found in folder: {folder}")
            return 0

        logger.info(f"Re-organizing {len(media_files)} media files in: {folder}")

        reorganized = 0
        errors: List[str] = []
        placed: Set[str] = set()

        for file_path in media_files:
            file_metadata = extract_metadata_from_file_name(file_path.name, content_type)
            if content_type == ContentType.TV_SHOW:
                file_metadata = derive_episode_info(file_path, file_metadata)
                season = file_metadata.season if file_metadata.season is not None else metadata.season
                episode = file_metadata.episode if file_metadata.episode is not None else metadata.episode
            else:
                season = metadata.season if metadata.season is not None else file_metadata.season
                episode = metadata.episode if metadata.episode is not None else file_metadata.episode

            context = OrganizationContext(
                content_type=content_type,
                original_path=str(file_path),
                file_name=file_path.name,
                file_size=file_path.stat().st_size,
                title=metadata.title if metadata.has_title else file_metadata.title,
                year=metadata.year or file_metadata.year,
                season=season,
                episode=episode,
                platform=metadata.platform or file_metadata.platform,
                quality=metadata.quality or file_metadata.quality,
                format=metadata.format or file_metadata.format,
                edition=metadata.edition or file_metadata.edition,
            )

            result = self.files.organize_file(context, request_id, placed)
            if result.success:
                reorganized += 1
            else:
                logger.warning(f"Failed to reorganize {file_path}: {result.error}")
                errors.append(f"{file_path.name}: {result.error}")

        logger.info(
            f"Reorganization complete for folder {folder}: {reorganized} reorganized, {len(errors)} skipped"
        )

        if reorganized == 0:
            raise ShelfarrError(f"No files could be organized ({errors[0]})")

        self.cleanup_empty_directories(folder)
        return reorganized

    def cleanup_empty_directories(self, start_path: str | Path) -> List[Path]:
        """Remove directories left empty (or holding only hidden files)"""
        removed = remove_empty_directories(start_path)
        if removed:
            logger.info(f"Cleaned up {len(removed)} empty directories under {start_path}")
        return removed
