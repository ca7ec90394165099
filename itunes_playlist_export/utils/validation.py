"""
Validation utilities for configuration values and file paths.
"""

import os
import re
from pathlib import Path
from typing import Any, Dict, List, Union, Tuple
import logging

logger = logging.getLogger(__name__)

OUTPUT_FORMATS = ("M3U", "EXT", "PLS", "WPL")
COPY_MODES = ("NONE", "PLAYLIST", "FLAT")
MISSING_TRACK_POLICIES = ("error", "skip")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def validate_file_path(
    path: Union[str, Path],
    must_exist: bool = True,
    must_be_file: bool = True,
    must_be_readable: bool = True,
) -> Tuple[bool, str]:
    """
    Validate a file path with various checks.

    Args:
        path: Path to validate
        must_exist: Whether the path must exist
        must_be_file: Whether the path must be a file (not directory)
        must_be_readable: Whether the file must be readable

    Returns:
        Tuple of (is_valid, error_message)
    """
    try:
        path_obj = Path(path).expanduser()

        if must_exist and not path_obj.exists():
            return False, f"Path does not exist: {path_obj}"

        if path_obj.exists():
            if must_be_file and not path_obj.is_file():
                return False, f"Path is not a file: {path_obj}"

            if must_be_readable and not os.access(path_obj, os.R_OK):
                return False, f"File is not readable: {path_obj}"

        return True, ""

    except (OSError, ValueError) as e:
        return False, f"Error validating path: {e}"


def validate_directory_path(
    path: Union[str, Path], must_exist: bool = True, must_be_writable: bool = False
) -> Tuple[bool, str]:
    """
    Validate a directory path.

    A path that does not exist yet is accepted when ``must_exist`` is False,
    as long as nothing else occupies it.

    Returns:
        Tuple of (is_valid, error_message)
    """
    try:
        path_obj = Path(path).expanduser()

        if must_exist and not path_obj.exists():
            return False, f"Directory does not exist: {path_obj}"

        if path_obj.exists() and not path_obj.is_dir():
            return False, f"Path is not a directory: {path_obj}"

        if must_be_writable and path_obj.exists():
            if not os.access(path_obj, os.W_OK):
                return False, f"Directory is not writable: {path_obj}"

        return True, ""

    except (OSError, ValueError) as e:
        return False, f"Error validating directory: {e}"


def validate_regex(pattern: str) -> Tuple[bool, str]:
    """Check that a playlist name pattern compiles."""
    try:
        re.compile(pattern)
    except re.error as e:
        return False, f"Invalid regular expression '{pattern}': {e}"
    return True, ""


def validate_choice(value: Any, choices: Tuple[str, ...], name: str) -> List[str]:
    """Check a case-insensitive enumerated setting."""
    if not isinstance(value, str) or value.upper() not in (c.upper() for c in choices):
        return [f"Invalid {name}: {value!r}. Must be one of {', '.join(choices)}"]
    return []


def validate_export_settings(settings: Dict[str, Any]) -> Tuple[bool, List[str]]:
    """
    Validate export settings in a configuration dictionary.

    Only the settings that are present are checked, so partial dictionaries
    (e.g. a config file before command-line overrides) can be validated too.

    Args:
        settings: Configuration dictionary

    Returns:
        Tuple of (is_valid, list_of_errors)
    """
    errors = []

    if settings.get("output_format") is not None:
        errors.extend(validate_choice(settings["output_format"], OUTPUT_FORMATS, "output format"))

    if settings.get("copy_mode") is not None:
        errors.extend(validate_choice(settings["copy_mode"], COPY_MODES, "copy mode"))

    if settings.get("missing_tracks") is not None:
        errors.extend(
            validate_choice(
                settings["missing_tracks"], MISSING_TRACK_POLICIES, "missing track policy"
            )
        )

    if settings.get("log_level") is not None:
        errors.extend(validate_choice(settings["log_level"], LOG_LEVELS, "log level"))

    if settings.get("library_path"):
        is_valid, error = validate_file_path(settings["library_path"])
        if not is_valid:
            errors.append(f"Library file: {error}")

    if settings.get("output_dir"):
        is_valid, error = validate_directory_path(settings["output_dir"], must_exist=False)
        if not is_valid:
            errors.append(f"Output directory: {error}")

    if settings.get("playlist_regex"):
        is_valid, error = validate_regex(settings["playlist_regex"])
        if not is_valid:
            errors.append(error)

    playlists = settings.get("playlists")
    if playlists is not None:
        if not isinstance(playlists, list):
            errors.append("'playlists' must be a list")
        else:
            for i, name in enumerate(playlists):
                if not isinstance(name, str) or not name.strip():
                    errors.append(f"'playlists[{i}]' must be a non-empty string")

    separator = settings.get("file_separator")
    if separator is not None and separator not in ("/", "\\"):
        errors.append(f"Invalid file separator: {separator!r}. Must be '/' or '\\'")

    return len(errors) == 0, errors
