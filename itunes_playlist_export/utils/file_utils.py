"""
File utilities for directory handling, media copies and safe file names.
"""

import shutil
from pathlib import Path
from typing import Union
import logging

logger = logging.getLogger(__name__)

# Characters that break file names on at least one of the common platforms
INVALID_FILENAME_CHARS = ["/", "\\", '"', "?", ":", "<", ">", "*", "|"]


def ensure_directory(path: Union[str, Path], create: bool = True) -> Path:
    """
    Ensure directory exists, optionally creating it.

    Args:
        path: Directory path
        create: Whether to create the directory if it doesn't exist

    Returns:
        Path object

    Raises:
        NotADirectoryError: If path exists but is not a directory
        OSError: If directory creation fails
    """
    path_obj = Path(path).expanduser()

    if path_obj.exists():
        if not path_obj.is_dir():
            raise NotADirectoryError(f"Path exists but is not a directory: {path_obj}")
        return path_obj

    if create:
        try:
            path_obj.mkdir(parents=True, exist_ok=True)
            logger.debug(f"Created directory: {path_obj}")
        except OSError as e:
            logger.error(f"Failed to create directory {path_obj}: {e}")
            raise

    return path_obj


def is_same_copy(source: Union[str, Path], destination: Union[str, Path]) -> bool:
    """
    Check whether destination already holds a copy of source.

    A copy made with ``copy_media_file`` keeps the source's size and
    modification time, which is what gets compared here.
    """
    source_path = Path(source)
    dest_path = Path(destination)

    if not dest_path.is_file():
        return False

    source_stat = source_path.stat()
    dest_stat = dest_path.stat()
    return (
        source_stat.st_size == dest_stat.st_size
        and int(source_stat.st_mtime) == int(dest_stat.st_mtime)
    )


def copy_media_file(source: Union[str, Path], destination: Union[str, Path]) -> Path:
    """
    Copy a media file, preserving its metadata.

    An existing destination that already holds this copy is left alone; any
    other file at the destination is overwritten with a warning.

    Args:
        source: Source file path
        destination: Destination file path

    Returns:
        Destination path

    Raises:
        FileNotFoundError: If the source file does not exist
        OSError: If the copy fails
    """
    source_path = Path(source)
    dest_path = Path(destination)

    if not source_path.is_file():
        raise FileNotFoundError(f"Source file does not exist: {source_path}")

    ensure_directory(dest_path.parent)

    if is_same_copy(source_path, dest_path):
        logger.debug(f"Already up to date: {dest_path}")
        return dest_path

    if dest_path.exists():
        logger.warning(f"Overwriting existing file with a different copy: {dest_path}")

    shutil.copy2(source_path, dest_path)
    logger.debug(f"Copied {source_path} -> {dest_path}")
    return dest_path


def numbered_path(path: Union[str, Path], number: int) -> Path:
    """Return ``name (N).ext`` next to the given path."""
    path_obj = Path(path)
    return path_obj.with_name(f"{path_obj.stem} ({number}){path_obj.suffix}")


def sanitize_filename(name: str, replacement: str = "_") -> str:
    """
    Make a playlist name usable as a file or directory name.

    Characters invalid on common file systems are replaced, as are leading
    and trailing dots, which hide files or get stripped on some systems.
    """
    for char in INVALID_FILENAME_CHARS:
        name = name.replace(char, replacement)

    name = name.strip()
    if name.startswith("."):
        name = replacement + name[1:]
    if name.endswith("."):
        name = name[:-1] + replacement

    return name or replacement
