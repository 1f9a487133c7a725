"""
Shelfarr v1.0.0 - File Utilities
File operations and directory traversal
"""

import errno
import logging
import os
import shutil
from pathlib import Path
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


def ensure_directory(path: str | Path) -> Path:
    """
    Ensure directory exists, create if it doesn't

    Args:
        path: Directory path

    Returns:
        Path object
    """
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def move_file(src: str | Path, dst: str | Path) -> Path:
    """
    Move file from src to dst

    Tries a rename first; when source and destination live on different
    devices the file is copied and the source deleted.

    Args:
        src: Source file path
        dst: Destination file path

    Returns:
        Destination path
    """
    src = Path(src)
    dst = Path(dst)

    # Ensure destination directory exists
    ensure_directory(dst.parent)

    try:
        os.rename(src, dst)
    except OSError as e:
        if e.errno != errno.EXDEV:
            raise
        logger.info(f"Cross-device move detected, using copy+delete for: {src}")
        copy_file(src, dst)
        src.unlink()

    return dst


def copy_file(src: str | Path, dst: str | Path) -> Path:
    """
    Copy file from src to dst

    Args:
        src: Source file path
        dst: Destination file path

    Returns:
        Destination path
    """
    src = Path(src)
    dst = Path(dst)

    # Ensure destination directory exists
    ensure_directory(dst.parent)

    # Copy file
    shutil.copy2(str(src), str(dst))

    return dst


def list_subdirectories(path: str | Path, include_hidden: bool = False) -> List[Path]:
    """Direct child directories of path, sorted by name."""
    path = Path(path)
    folders = [
        child
        for child in path.iterdir()
        if child.is_dir() and (include_hidden or not child.name.startswith("."))
    ]
    return sorted(folders, key=lambda p: p.name.lower())


def walk_files(root: str | Path, predicate: Optional[Callable[[Path], bool]] = None) -> List[Path]:
    """
    List every file under root (depth-first, explicit stack)

    Unreadable directories are logged and skipped.

    Args:
        root: Directory to walk
        predicate: Optional filter applied to each file

    Returns:
        Sorted list of file paths
    """
    files: List[Path] = []
    stack = [Path(root)]

    while stack:
        current = stack.pop()
        try:
            entries = list(current.iterdir())
        except OSError as e:
            logger.error(f"Error reading directory {current}: {e}")
            continue

        for entry in entries:
            if entry.is_dir() and not entry.is_symlink():
                stack.append(entry)
            elif entry.is_file():
                if predicate is None or predicate(entry):
                    files.append(entry)

    return sorted(files)


def has_files(path: str | Path, predicate: Callable[[Path], bool]) -> bool:
    """True if the directory directly contains a file matching predicate."""
    try:
        return any(entry.is_file() and predicate(entry) for entry in Path(path).iterdir())
    except OSError as e:
        logger.error(f"Error reading directory {path}: {e}")
        return False


def remove_empty_directories(root: str | Path) -> List[Path]:
    """
    Remove empty directories under root, deepest first, root included

    A directory holding only hidden files counts as empty: the hidden
    files are deleted before the directory is removed.

    Args:
        root: Top directory to clean

    Returns:
        Directories that were removed
    """
    root = Path(root)
    if not root.is_dir():
        return []

    # Collect directories top-down, then visit them in reverse (bottom-up)
    ordered: List[Path] = []
    stack = [root]
    while stack:
        current = stack.pop()
        ordered.append(current)
        try:
            stack.extend(
                child for child in current.iterdir() if child.is_dir() and not child.is_symlink()
            )
        except OSError as e:
            logger.warning(f"Error reading directory {current}: {e}")

    removed: List[Path] = []
    for directory in reversed(ordered):
        try:
            entries = list(directory.iterdir())
        except OSError:
            continue

        has_real_content = any(
            entry.is_dir() or not entry.name.startswith(".") for entry in entries
        )
        if has_real_content:
            continue

        for hidden in entries:
            try:
                hidden.unlink()
                logger.debug(f"Removed hidden file: {hidden}")
            except OSError as e:
                logger.warning(f"Failed to remove hidden file {hidden}: {e}")

        try:
            directory.rmdir()
            removed.append(directory)
            logger.info(f"Removed empty directory: {directory}")
        except OSError as e:
            logger.debug(f"Could not remove directory {directory}: {e}")

    return removed
