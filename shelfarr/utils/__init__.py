"""
Shelfarr v1.0.0 - Utilities
Helper functions and utilities
"""

from .files import ensure_directory, move_file, copy_file, walk_files, remove_empty_directories
from .path_template import PathTemplateEngine
from .media_names import is_media_file, is_archive_file, is_season_folder, parse_season_number
from .cron import parse_cron
from .logging_setup import setup_logging

__all__ = [
    "ensure_directory",
    "move_file",
    "copy_file",
    "walk_files",
    "remove_empty_directories",
    "PathTemplateEngine",
    "is_media_file",
    "is_archive_file",
    "is_season_folder",
    "parse_season_number",
    "parse_cron",
    "setup_logging",
]
