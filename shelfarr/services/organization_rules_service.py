"""
Shelfarr v1.0.0 - Organization Rules Service
Naming rules, organization settings and destination path generation
"""

import logging
import re
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..config import settings as env_settings
from ..exceptions import InvalidTemplateError, RuleNotFoundError
from ..models import ContentType, OrganizationRule, OrganizationSettings
from ..schemas.organization import FileMetadata, OrganizationContext, PathGenerationResult
from ..utils.cron import parse_cron
from ..utils.media_names import strip_extension
from ..utils.path_template import PathTemplateEngine

logger = logging.getLogger(__name__)


# Default naming rules per content type
DEFAULT_RULES: Dict[ContentType, Dict[str, Optional[str]]] = {
    ContentType.MOVIE: {
        "folder_name_pattern": "{title} ({year})",
        "file_name_pattern": "{title} ({year}) - {edition} - {quality} - {format}",
        "season_folder_pattern": None,
    },
    ContentType.TV_SHOW: {
        "folder_name_pattern": "{title} ({year})",
        "file_name_pattern": "{title} - S{seasonNumber}E{episodeNumber} - {edition} - {quality} - {format}",
        "season_folder_pattern": "Season {seasonNumber}",
    },
    ContentType.GAME: {
        "folder_name_pattern": "{title} ({platform})",
        "file_name_pattern": "{title} ({platform}) - {edition}",
        "season_folder_pattern": None,
    },
}

# Subfolder of library_path per content type, and the settings column overriding it
LIBRARY_SUBFOLDERS: Dict[ContentType, str] = {
    ContentType.MOVIE: "movies",
    ContentType.TV_SHOW: "tv-shows",
    ContentType.GAME: "games",
}
PATH_OVERRIDE_FIELDS: Dict[ContentType, str] = {
    ContentType.MOVIE: "movies_path",
    ContentType.TV_SHOW: "tv_shows_path",
    ContentType.GAME: "games_path",
}

# Name patterns: optional " - part" groups hold quality, format, edition
FILE_NAME_PATTERNS: Dict[ContentType, re.Pattern] = {
    ContentType.MOVIE: re.compile(
        r"^(.+?)\s*\((\d{4})\)(?:\s*-\s*(.+?))?(?:\s*-\s*(.+?))?(?:\s*-\s*(.+?))?$"
    ),
    ContentType.TV_SHOW: re.compile(
        r"^(.+?)\s*-\s*S(\d+)E(\d+)(?:\s*-\s*(.+?))?(?:\s*-\s*(.+?))?(?:\s*-\s*(.+?))?$"
    ),
    ContentType.GAME: re.compile(r"^(.+?)\s*\((.+?)\)(?:\s*-\s*(.+?))?$"),
}


def _movie_metadata(match: re.Match) -> FileMetadata:
    return FileMetadata(
        title=match.group(1).strip(),
        year=int(match.group(2)),
        quality=match.group(3),
        format=match.group(4),
        edition=match.group(5),
    )


def _tv_metadata(match: re.Match) -> FileMetadata:
    return FileMetadata(
        title=match.group(1).strip(),
        season=int(match.group(2)),
        episode=int(match.group(3)),
        quality=match.group(4),
        format=match.group(5),
        edition=match.group(6),
    )


def _game_metadata(match: re.Match) -> FileMetadata:
    return FileMetadata(
        title=match.group(1).strip(),
        platform=match.group(2).strip(),
        edition=match.group(3),
    )


METADATA_BUILDERS = {
    ContentType.MOVIE: _movie_metadata,
    ContentType.TV_SHOW: _tv_metadata,
    ContentType.GAME: _game_metadata,
}


def as_content_type(value: Any) -> ContentType:
    """Coerce a string or enum to ContentType, raising ValueError if unknown"""
    try:
        return ContentType(value)
    except ValueError:
        raise ValueError(f"Unknown content type: {value}")


def validate_template(template: Optional[str], field: str = "template") -> None:
    """Raise InvalidTemplateError if a naming template is malformed"""
    is_valid, error = PathTemplateEngine.validate_template(template or "")
    if not is_valid:
        raise InvalidTemplateError(f"Invalid {field}: {error}")


def build_template_variables(context: OrganizationContext) -> Dict[str, Any]:
    """Placeholder values for one file"""

    def padded(value: Optional[int]) -> str:
        return f"{value:02d}" if value is not None else ""

    stem = strip_extension(context.file_name) if context.file_name else ""

    return {
        "title": context.title or "Unknown",
        "year": context.year,
        "season": context.season,
        "seasonNumber": padded(context.season),
        "episode": context.episode,
        "episodeNumber": padded(context.episode),
        "platform": context.platform,
        "quality": context.quality,
        "format": context.format,
        "edition": context.edition,
        "filename": stem or "Unknown",
    }


class OrganizationRulesService:
    """Settings, naming rules and path generation"""

    def __init__(self, db: Session):
        self.db = db

    # Settings

    def get_settings(self) -> OrganizationSettings:
        """Return the settings row, creating it with defaults if missing."""
        record = self.db.query(OrganizationSettings).first()

        if not record:
            record = OrganizationSettings(
                library_path=env_settings.LIBRARY_PATH,
                organize_on_complete=True,  # stored for the download hand-off
                replace_existing_files=True,
                extract_archives=True,
                delete_after_extraction=True,
                enable_reverse_indexing=True,
                reverse_indexing_cron="0 * * * *",
                created_at=time.time(),
                updated_at=time.time(),
            )
            self.db.add(record)
            self.db.commit()
            self.db.refresh(record)
            logger.info(f"Created default organization settings (library: {record.library_path})")

        return record

    def update_settings(self, updates: Dict[str, Any]) -> OrganizationSettings:
        """Update settings with provided fields (None values are ignored)."""
        record = self.get_settings()

        cron = updates.get("reverse_indexing_cron")
        if cron is not None:
            parse_cron(cron)

        changed = False
        for key, value in updates.items():
            if value is None:
                continue
            if hasattr(record, key) and key not in ("id", "created_at", "updated_at"):
                setattr(record, key, value)
                changed = True

        if changed:
            record.updated_at = time.time()
            self.db.commit()
            self.db.refresh(record)

        return record

    # Rules

    def get_rule_for_content_type(
        self, content_type: ContentType, platform: Optional[str] = None
    ) -> OrganizationRule:
        """
        Pick the naming rule for a content type

        Games with a platform first look for an active rule scoped to that
        platform. Otherwise the active rule without platform is used; a
        default rule is created when none exists.
        """
        content_type = as_content_type(content_type)
        ordering = (OrganizationRule.is_default.desc(), OrganizationRule.created_at.desc())

        if content_type == ContentType.GAME and platform:
            rule = (
                self.db.query(OrganizationRule)
                .filter(
                    OrganizationRule.content_type == content_type.value,
                    OrganizationRule.platform == platform,
                    OrganizationRule.is_active.is_(True),
                )
                .order_by(*ordering)
                .first()
            )
            if rule:
                return rule

        rule = (
            self.db.query(OrganizationRule)
            .filter(
                OrganizationRule.content_type == content_type.value,
                OrganizationRule.platform.is_(None),
                OrganizationRule.is_active.is_(True),
            )
            .order_by(*ordering)
            .first()
        )

        if rule:
            return rule

        return self._create_default_rule(content_type)

    def get_all_rules(self) -> List[OrganizationRule]:
        """All rules grouped by content type, default first, newest first"""
        return (
            self.db.query(OrganizationRule)
            .order_by(
                OrganizationRule.content_type.asc(),
                OrganizationRule.is_default.desc(),
                OrganizationRule.created_at.desc(),
            )
            .all()
        )

    def get_rule(self, rule_id: str) -> OrganizationRule:
        rule = self.db.query(OrganizationRule).filter(OrganizationRule.id == rule_id).first()
        if not rule:
            raise RuleNotFoundError(rule_id)
        return rule

    def create_rule(self, data: Dict[str, Any]) -> OrganizationRule:
        """Create a rule; a new default replaces the previous default."""
        content_type = as_content_type(data["content_type"])

        validate_template(data.get("folder_name_pattern"), "folder_name_pattern")
        validate_template(data.get("file_name_pattern"), "file_name_pattern")
        validate_template(data.get("season_folder_pattern"), "season_folder_pattern")

        if data.get("is_default"):
            self._unset_defaults(content_type)

        rule = OrganizationRule(
            content_type=content_type.value,
            platform=data.get("platform"),
            is_default=bool(data.get("is_default", False)),
            is_active=bool(data.get("is_active", True)),
            folder_name_pattern=data["folder_name_pattern"],
            file_name_pattern=data["file_name_pattern"],
            season_folder_pattern=data.get("season_folder_pattern"),
            base_path=data.get("base_path"),
            created_at=time.time(),
            updated_at=time.time(),
        )
        self.db.add(rule)
        self.db.commit()
        self.db.refresh(rule)

        logger.info(f"Created organization rule {rule.id} for {content_type.value}")
        return rule

    def update_rule(self, rule_id: str, updates: Dict[str, Any]) -> OrganizationRule:
        """Update a rule (None values are ignored)."""
        rule = self.get_rule(rule_id)

        for field in ("folder_name_pattern", "file_name_pattern", "season_folder_pattern"):
            if updates.get(field) is not None:
                validate_template(updates[field], field)

        if updates.get("is_default"):
            self._unset_defaults(as_content_type(rule.content_type), exclude_id=rule.id)

        for key, value in updates.items():
            if value is None or key in ("id", "content_type", "created_at", "updated_at"):
                continue
            if hasattr(rule, key):
                setattr(rule, key, value)

        rule.updated_at = time.time()
        self.db.commit()
        self.db.refresh(rule)
        return rule

    def delete_rule(self, rule_id: str) -> None:
        rule = self.get_rule(rule_id)
        self.db.delete(rule)
        self.db.commit()
        logger.info(f"Deleted organization rule {rule_id}")

    def _unset_defaults(self, content_type: ContentType, exclude_id: Optional[str] = None) -> None:
        query = self.db.query(OrganizationRule).filter(
            OrganizationRule.content_type == content_type.value,
            OrganizationRule.is_default.is_(True),
        )
        if exclude_id:
            query = query.filter(OrganizationRule.id != exclude_id)

        for rule in query.all():
            rule.is_default = False
            rule.updated_at = time.time()

    def _create_default_rule(self, content_type: ContentType) -> OrganizationRule:
        defaults = DEFAULT_RULES[content_type]
        rule = OrganizationRule(
            content_type=content_type.value,
            is_default=True,
            is_active=True,
            folder_name_pattern=defaults["folder_name_pattern"],
            file_name_pattern=defaults["file_name_pattern"],
            season_folder_pattern=defaults["season_folder_pattern"],
            created_at=time.time(),
            updated_at=time.time(),
        )
        self.db.add(rule)
        self.db.commit()
        self.db.refresh(rule)

        logger.info(f"Created default organization rule for {content_type.value}")
        return rule

    # Paths

    def get_library_directory(self, content_type: ContentType) -> Path:
        """Library directory for a content type (settings override or subfolder)"""
        content_type = as_content_type(content_type)
        record = self.get_settings()

        override = getattr(record, PATH_OVERRIDE_FIELDS[content_type])
        if override:
            return Path(override)
        return Path(record.library_path) / LIBRARY_SUBFOLDERS[content_type]

    def generate_organized_path(self, context: OrganizationContext) -> PathGenerationResult:
        """
        Compute where a file belongs in the library

        Args:
            context: Descriptor plus the source file name

        Returns:
            Folder path, file name and full path
        """
        content_type = as_content_type(context.content_type)
        rule = self.get_rule_for_content_type(content_type, context.platform)

        base_path = Path(rule.base_path) if rule.base_path else self.get_library_directory(content_type)

        variables = build_template_variables(context)

        folder_path = base_path / PathTemplateEngine.render(rule.folder_name_pattern, variables)

        if (
            content_type == ContentType.TV_SHOW
            and context.season is not None
            and rule.season_folder_pattern
        ):
            season_folder = PathTemplateEngine.render(rule.season_folder_pattern, variables)
            if season_folder:
                folder_path = folder_path / season_folder

        file_stem = PathTemplateEngine.render(rule.file_name_pattern, variables)
        extension = Path(context.file_name).suffix if context.file_name else ""
        file_name = f"{file_stem}{extension}"

        full_path = folder_path / file_name

        return PathGenerationResult(
            folder_path=str(folder_path),
            file_name=file_name,
            full_path=str(full_path),
        )

    # Extraction

    def extract_metadata_from_file_name(
        self, file_name: str, content_type: ContentType
    ) -> FileMetadata:
        """Best-guess descriptor from a canonical file or folder name"""
        return extract_metadata_from_file_name(file_name, content_type)


def extract_metadata_from_file_name(file_name: str, content_type: ContentType) -> FileMetadata:
    """
    Parse a name produced by the default templates

    Movie "Title (Year) - Quality - Format - Edition", TV
    "Title - SxxEyy - Quality - Format - Edition", game
    "Title (Platform) - Edition". Anything else gives title "Unknown".
    """
    content_type = as_content_type(content_type)
    name = strip_extension(file_name)

    match = FILE_NAME_PATTERNS[content_type].match(name)
    if not match:
        return FileMetadata(title="Unknown")

    return METADATA_BUILDERS[content_type](match)
