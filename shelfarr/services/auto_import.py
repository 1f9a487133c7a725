"""
Shelfarr v1.0.0 - Auto-Import Gate
Decide whether a folder's detected metadata is trustworthy enough to
create a tracking record without asking the user
"""

import re
from datetime import datetime
from typing import Optional

from ..models import ContentType
from ..schemas.organization import FileMetadata


TITLE_REJECT_PATTERNS = [
    # Generic placeholders
    re.compile(r"^(unknown|movie|film|video|sample|trailer|extras|bonus)$", re.IGNORECASE),
    re.compile(r"^(unknown|movie|film)[.\-_\s]", re.IGNORECASE),
    # Quality and codec tags left in the title
    re.compile(
        r"\b(720p|1080p|2160p|4k|bluray|webrip|dvdrip|hdtv|web-dl|x264|x265|hevc|aac|ac3)\b",
        re.IGNORECASE,
    ),
    # Release groups and non-feature content
    re.compile(r"\b(sample|trailer|extras|bonus|rarbg|yify|eztv)\b", re.IGNORECASE),
    # A file name, not a title
    re.compile(r"\.(mkv|mp4|avi|mov|wmv|flv|webm)$", re.IGNORECASE),
    # Disc markers
    re.compile(r"\b(disc|disk|cd|dvd)\s*\d+", re.IGNORECASE),
    re.compile(r"^[^a-zA-Z]"),
    re.compile(r"^\w{1,3}$"),
]

MOVIE_TITLE_REJECT_PATTERNS = [
    re.compile(r"\b(rip|cam|ts|tc|scr|dvdscr|brrip|hdrip)\b", re.IGNORECASE),
    re.compile(r"\b(repack|proper|internal|limited|unrated|extended|directors?\.cut)\b", re.IGNORECASE),
    re.compile(r"\b(multi|dual|audio|subs?|subtitles?)\b", re.IGNORECASE),
    re.compile(r"[\[(].*?(group|team|release).*?[\])]", re.IGNORECASE),
    re.compile(r"\b\d{4}\b.*\b\d{4}\b"),
]

GENERIC_WORDS = frozenset(["movie", "film", "video", "show", "series", "game"])

MIN_TITLE_LENGTH = 3
MAX_TITLE_LENGTH = 100
MAX_MOVIE_TITLE_LENGTH = 80
MIN_LETTER_RATIO = 0.5
MIN_MOVIE_YEAR = 1900


def is_title_suitable_for_auto_import(title: Optional[str]) -> bool:
    """Reject empty, noisy or generic titles"""
    if not title:
        return False

    clean = title.strip()
    if len(clean) < MIN_TITLE_LENGTH or len(clean) > MAX_TITLE_LENGTH:
        return False

    if any(pattern.search(clean) for pattern in TITLE_REJECT_PATTERNS):
        return False

    letters = sum(1 for char in clean if char.isalpha() and char.isascii())
    if letters == 0:
        return False

    return letters / len(clean) >= MIN_LETTER_RATIO


def is_well_formatted_movie_title(title: str) -> bool:
    """Stricter title check for movies: no release tags, sensible words"""
    clean = title.strip()
    if len(clean) < MIN_TITLE_LENGTH or len(clean) > MAX_MOVIE_TITLE_LENGTH:
        return False

    if any(pattern.search(clean) for pattern in MOVIE_TITLE_REJECT_PATTERNS):
        return False

    words = [word for word in clean.split() if word]
    if len(words) >= 2:
        return True

    # Single word titles: long enough and not generic
    return len(words) == 1 and len(words[0]) >= 4 and words[0].lower() not in GENERIC_WORDS


def is_movie_suitable_for_auto_import(metadata: FileMetadata) -> bool:
    if not metadata.year:
        return False

    if metadata.year < MIN_MOVIE_YEAR or metadata.year > datetime.now().year + 2:
        return False

    return is_well_formatted_movie_title(metadata.title)


def _never(metadata: FileMetadata) -> bool:
    # TV and games always need confirmation
    return False


CONTENT_TYPE_GATES = {
    ContentType.MOVIE: is_movie_suitable_for_auto_import,
    ContentType.TV_SHOW: _never,
    ContentType.GAME: _never,
}


def is_suitable_for_auto_import(metadata: FileMetadata, content_type: ContentType) -> bool:
    """
    Confidence gate for creating a tracking record without confirmation

    Args:
        metadata: Refined and enriched descriptor of the folder
        content_type: Library the folder was found in

    Returns:
        True if the folder can be imported automatically
    """
    try:
        gate = CONTENT_TYPE_GATES[ContentType(content_type)]
    except KeyError:
        raise ValueError(f"Unknown content type: {content_type}")

    if not is_title_suitable_for_auto_import(metadata.title):
        return False

    return gate(metadata)
