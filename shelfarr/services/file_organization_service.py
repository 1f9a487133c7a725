"""
Shelfarr v1.0.0 - File Organization Service
Move files into the library layout and record where they went
"""

import logging
import time
from pathlib import Path
from typing import List, Optional, Set

from sqlalchemy.orm import Session

from ..config import settings as env_settings
from ..models import OrganizedFile
from ..schemas.organization import ExtractionResult, OrganizationContext, OrganizationResult
from ..utils.files import ensure_directory, move_file, walk_files
from ..utils.media_names import is_archive_file
from .organization_rules_service import OrganizationRulesService

logger = logging.getLogger(__name__)


def resolve_path(path: str) -> Path:
    """Absolute path; relative paths are taken from APP_ROOT."""
    candidate = Path(path)
    if candidate.is_absolute():
        return candidate
    return Path(env_settings.APP_ROOT) / candidate


def extract_archive(archive_path: Path) -> ExtractionResult:
    """
    Archive extraction hook

    Extraction itself is not supported: the archive is reported as not
    extracted and callers place it as a regular file.
    """
    name = archive_path.name.lower()
    if name.endswith(".zip"):
        return ExtractionResult(success=False, error="ZIP extraction not implemented yet")
    return ExtractionResult(success=False, error="Unsupported archive format")


def unique_target(target: Path, placed: Set[str]) -> Path:
    """
    Destination not yet taken by this operation

    "Heat (1995).mkv" becomes "Heat (1995) - part2.mkv", then "- part3", ...
    Only files already in the library may be replaced, not ones placed here.
    """
    candidate = target
    part = 2
    while str(candidate) in placed:
        candidate = target.with_name(f"{target.stem} - part{part}{target.suffix}")
        part += 1
    return candidate


class FileOrganizationService:
    """Service placing files into the organized library"""

    def __init__(self, db: Session):
        self.db = db
        self.rules = OrganizationRulesService(db)

    def organize_file(
        self,
        context: OrganizationContext,
        request_id: Optional[str] = None,
        placed: Optional[Set[str]] = None,
    ) -> OrganizationResult:
        """
        Organize one file (or the files extracted from an archive)

        Args:
            context: Descriptor plus source path
            request_id: Tracking record the placed files belong to
            placed: Destinations already written by the calling operation;
                they are never overwritten and the set is updated in place

        Returns:
            OrganizationResult; failures are reported, never raised
        """
        source = resolve_path(context.original_path)
        if placed is None:
            placed = set()

        try:
            if not source.exists():
                return OrganizationResult(
                    success=False,
                    original_path=str(source),
                    error="File not found",
                )

            org_settings = self.rules.get_settings()

            files_to_organize: List[Path] = [source]
            extracted_files: Optional[List[str]] = None

            if org_settings.extract_archives and is_archive_file(source):
                extraction = extract_archive(source)
                if extraction.success and extraction.extracted_files:
                    extracted_files = extraction.extracted_files
                    files_to_organize = [Path(f) for f in extraction.extracted_files]

                    if org_settings.delete_after_extraction:
                        source.unlink()
                        logger.info(f"Deleted archive after extraction: {source}")
                else:
                    logger.info(f"Archive not extracted ({extraction.error}), organizing as-is: {source}")

            organized_paths: List[str] = []
            errors: List[str] = []

            for file_path in files_to_organize:
                result = self._organize_single_file(
                    file_path, context, org_settings.replace_existing_files, request_id, placed
                )
                if result.success:
                    organized_paths.append(result.organized_path)
                else:
                    errors.append(result.error or "Unknown error")

            success = len(organized_paths) > 0
            return OrganizationResult(
                success=success,
                original_path=str(source),
                organized_path=organized_paths[0] if organized_paths else None,
                error=f"{len(errors)} file(s) failed: {'; '.join(errors)}" if errors else None,
                files_processed=len(organized_paths),
                extracted_files=extracted_files,
            )

        except Exception as e:
            logger.error(
                f"Failed to organize {source} ({context.content_type.value}, '{context.title}'): {e}"
            )
            return OrganizationResult(
                success=False,
                original_path=str(source),
                error=str(e),
            )

    def _organize_single_file(
        self,
        file_path: Path,
        context: OrganizationContext,
        replace_existing: bool,
        request_id: Optional[str],
        placed: Set[str],
    ) -> OrganizationResult:
        file_context = context.model_copy(
            update={"original_path": str(file_path), "file_name": file_path.name}
        )
        destination = self.rules.generate_organized_path(file_context)
        target = unique_target(Path(destination.full_path), placed)

        ensure_directory(target.parent)

        same_file = file_path.resolve() == target.resolve()

        if target.exists() and not same_file:
            if not replace_existing:
                return OrganizationResult(
                    success=False,
                    original_path=str(file_path),
                    error="File already exists and replace is disabled",
                )
            target.unlink()
            logger.info(f"Replacing existing file: {target}")

        file_size = file_path.stat().st_size

        if not same_file:
            move_file(file_path, target)

        # A file indexed in place is moved again: update its record
        record = (
            self.db.query(OrganizedFile)
            .filter(OrganizedFile.organized_path == str(file_path))
            .first()
        )
        if record is None:
            record = OrganizedFile(original_path=str(file_path))
            self.db.add(record)

        placed.add(str(target))

        record.organized_path = str(target)
        record.file_name = target.name
        record.file_size = file_size
        record.content_type = context.content_type.value
        record.title = context.title
        record.year = context.year
        record.season = context.season
        record.episode = context.episode
        record.platform = context.platform
        record.quality = context.quality
        record.format = context.format
        record.edition = context.edition
        record.is_reverse_indexed = False
        record.request_id = request_id or record.request_id
        record.organized_at = time.time()
        self.db.commit()

        logger.info(f"Organized: {file_path} -> {target}")

        return OrganizationResult(
            success=True,
            original_path=str(file_path),
            organized_path=str(target),
            files_processed=1,
        )

    def organize_directory(
        self,
        directory: str,
        context: OrganizationContext,
        request_id: Optional[str] = None,
    ) -> List[OrganizationResult]:
        """Organize every file under a directory with the same descriptor"""
        root = resolve_path(directory)
        results: List[OrganizationResult] = []

        if not root.is_dir():
            logger.warning(f"Directory not found: {root}")
            return results

        placed: Set[str] = set()
        for file_path in walk_files(root):
            file_context = context.model_copy(
                update={
                    "original_path": str(file_path),
                    "file_name": file_path.name,
                    "file_size": file_path.stat().st_size,
                }
            )
            results.append(self.organize_file(file_context, request_id, placed))

        return results
