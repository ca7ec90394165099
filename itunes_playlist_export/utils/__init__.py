"""
Utility modules for common functionality.
"""

from .logging import setup_logging, get_logger, log_exception
from .file_utils import ensure_directory, copy_media_file, sanitize_filename
from .validation import validate_export_settings, validate_file_path

__all__ = [
    "setup_logging",
    "get_logger",
    "log_exception",
    "ensure_directory",
    "copy_media_file",
    "sanitize_filename",
    "validate_export_settings",
    "validate_file_path",
]
