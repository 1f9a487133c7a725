"""
Shelfarr v1.0.0 - Media Name Heuristics
Recognise media files, season folders and the metadata hidden in
release-style folder and file names
"""

import re
from pathlib import Path
from typing import Optional, Tuple

from ..models.enums import ContentType
from ..schemas.organization import FileMetadata


MEDIA_EXTENSIONS = frozenset(
    [
        # Video
        ".mp4", ".mkv", ".avi", ".mov", ".wmv", ".flv", ".webm", ".m4v",
        # Audio
        ".mp3", ".flac", ".wav", ".aac", ".ogg", ".m4a",
        # Disc images
        ".iso", ".rom", ".bin", ".cue", ".img", ".nrg", ".mdf", ".mds",
        # Console ROMs
        ".nes", ".smc", ".sfc", ".gb", ".gbc", ".gba", ".nds", ".3ds",
        ".z64", ".n64", ".v64", ".psx", ".ps2", ".gcm", ".wbfs", ".rvz",
    ]
)

# Multi-part suffixes first so ".tar.gz" wins over ".gz"
ARCHIVE_EXTENSIONS = (".tar.gz", ".zip", ".rar", ".7z", ".tar", ".tgz")

SEASON_FOLDER_PATTERNS = [
    re.compile(r"^season\s*\d+", re.IGNORECASE),
    re.compile(r"^s\d+", re.IGNORECASE),
]

EPISODE_PATTERNS = [
    re.compile(r"[Ss](\d+)[Ee](\d+)"),
    re.compile(r"[Ss](\d+)\s*[Ee](\d+)"),
    re.compile(r"Season\s*(\d+).*Episode\s*(\d+)", re.IGNORECASE),
    re.compile(r"(\d+)x(\d+)"),
]

# Region tags are not platforms: "Zelda (USA) (N64)"
REGION_TAGS = frozenset(
    ["usa", "us", "europe", "eu", "eur", "japan", "jp", "jpn", "world", "en", "pal", "ntsc"]
)

RELEASE_NOISE = re.compile(
    r"\b(720p|1080p|2160p|4k|bluray|blu-ray|brrip|webrip|web-dl|webdl|dvdrip|hdtv|x264|x265|hevc|"
    r"remux|hdr|proper|repack)\b.*$",
    re.IGNORECASE,
)
PAREN_YEAR = re.compile(r"\((\d{4})\)")
BRACKET_YEAR = re.compile(r"\[(\d{4})\]")
STANDALONE_YEAR = re.compile(r"(?<!\d)((?:19|20)\d{2})(?!\d)")
TV_MARKER = re.compile(r"\b(?:[Ss]\d+(?:[Ee]\d+)?|season\s*\d+)\b.*$", re.IGNORECASE)
SEASON_IN_NAME = re.compile(r"\b(?:[Ss](\d+)(?:[Ee]\d+)?|season\s*(\d+))\b", re.IGNORECASE)
PARENTHESES = re.compile(r"\(([^)]+)\)")


def is_media_file(path: str | Path) -> bool:
    """Check whether the file has a recognised media extension"""
    return Path(path).suffix.lower() in MEDIA_EXTENSIONS


def is_archive_file(path: str | Path) -> bool:
    """Check whether the file has a recognised archive extension"""
    name = Path(path).name.lower()
    return name.endswith(ARCHIVE_EXTENSIONS)


def strip_extension(file_name: str) -> str:
    """Drop the last extension: "Movie (2010).mkv" -> "Movie (2010)" """
    return re.sub(r"\.[^/.\s]+$", "", file_name)


def is_season_folder(name: str) -> bool:
    """Check whether a folder name looks like "Season 1" or "S01" """
    return any(pattern.match(name) for pattern in SEASON_FOLDER_PATTERNS)


def parse_season_number(name: str) -> Optional[int]:
    """Season number from a season folder name, if any"""
    match = re.search(r"season\s*(\d+)", name, re.IGNORECASE) or re.search(
        r"s(\d+)", name, re.IGNORECASE
    )
    return int(match.group(1)) if match else None


def _clean_title(text: str) -> str:
    text = re.sub(r"\[[^\]]*\]", " ", text)
    text = RELEASE_NOISE.sub("", text)
    # Dots only separate words in names without spaces ("The.Matrix")
    text = re.sub(r"[._]" if " " not in text.strip() else r"_", " ", text)
    text = re.sub(r"\s+", " ", text).strip()
    return text.strip(" -.")


def _find_year(name: str) -> Tuple[Optional[int], Optional[int]]:
    """(year, start index of the year token) preferring bracketed years"""
    for pattern in (PAREN_YEAR, BRACKET_YEAR):
        match = pattern.search(name)
        if match:
            return int(match.group(1)), match.start()

    # Release names put the year after the title: take the last one
    matches = list(STANDALONE_YEAR.finditer(name))
    if matches and matches[-1].start() > 0:
        return int(matches[-1].group(1)), matches[-1].start()
    return None, None


def _refine_movie(folder_name: str, metadata: FileMetadata) -> None:
    year, year_at = _find_year(folder_name)
    if year is not None:
        metadata.year = year

    head = folder_name[:year_at] if year_at is not None else folder_name
    title = _clean_title(head)
    if title:
        metadata.title = title


def _refine_tv(folder_name: str, metadata: FileMetadata) -> None:
    year, year_at = _find_year(folder_name)
    if year is not None:
        metadata.year = year

    season = SEASON_IN_NAME.search(folder_name)
    if season and metadata.season is None:
        metadata.season = int(season.group(1) or season.group(2))

    head = folder_name[:year_at] if year_at is not None else folder_name
    title = _clean_title(TV_MARKER.sub("", head))
    if title:
        metadata.title = title


def _refine_game(folder_name: str, metadata: FileMetadata) -> None:
    year, _ = _find_year(folder_name)
    if year is not None:
        metadata.year = year

    for group in PARENTHESES.findall(folder_name):
        candidate = group.strip()
        if candidate.lower() in REGION_TAGS or re.fullmatch(r"\d{4}", candidate):
            continue
        metadata.platform = candidate
        break

    title = _clean_title(PARENTHESES.sub(" ", folder_name))
    if title:
        metadata.title = title


_FOLDER_REFINERS = {
    ContentType.MOVIE: _refine_movie,
    ContentType.TV_SHOW: _refine_tv,
    ContentType.GAME: _refine_game,
}


def refine_from_folder_name(
    folder_name: str, content_type: ContentType, metadata: FileMetadata
) -> FileMetadata:
    """
    Improve a base descriptor using folder naming conventions

    Picks up bracketed or standalone years, strips release noise
    (resolution, source, codec tags) from titles and, for games, takes
    the platform from parentheses.

    Args:
        folder_name: Name of the content folder (no path)
        content_type: Content type of the library the folder lives in
        metadata: Base descriptor, refined in place

    Returns:
        The same descriptor
    """
    try:
        refiner = _FOLDER_REFINERS[ContentType(content_type)]
    except KeyError:
        raise ValueError(f"Unknown content type: {content_type}")

    refiner(folder_name, metadata)
    return metadata


def derive_episode_info(file_path: str | Path, metadata: FileMetadata) -> FileMetadata:
    """
    Fill season/episode for a TV file from its name and parent folders

    The parent folder sets the season when it is a season folder; the
    file name patterns (S01E02, S01 E02, Season 1 Episode 2, 1x02) then
    override both numbers. As a last resort the season is read from any
    ancestor folder named "Season N" or ending in "sN".
    """
    path = Path(file_path)

    parent = path.parent.name
    if is_season_folder(parent):
        season = parse_season_number(parent)
        if season is not None:
            metadata.season = season

    for pattern in EPISODE_PATTERNS:
        match = pattern.search(path.name)
        if match:
            metadata.season = int(match.group(1))
            metadata.episode = int(match.group(2))
            break

    if metadata.season is None:
        for ancestor in path.parents:
            match = re.search(r"season\s*(\d+)", ancestor.name, re.IGNORECASE) or re.search(
                r"s(\d+)$", ancestor.name, re.IGNORECASE
            )
            if match:
                metadata.season = int(match.group(1))
                break

    return metadata
