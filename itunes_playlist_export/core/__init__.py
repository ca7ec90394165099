"""
Core modules for iTunes Playlist Export functionality.
"""

from .config import Config, load_config
from .errors import (
    PlaylistExportError,
    ConfigurationError,
    LibraryParseError,
    TrackReferenceError,
    PlaylistSelectionError,
    ExportIOError,
    LibraryReadError,
)
from .library import Library, Playlist, Track, load_library
from .paths import PathNormalizer
from .resolver import ResolvedTrack, resolve_playlist
from .exporter import PlaylistExporter, PlaylistExportResult

__all__ = [
    "Config",
    "load_config",
    "PlaylistExportError",
    "ConfigurationError",
    "LibraryParseError",
    "TrackReferenceError",
    "PlaylistSelectionError",
    "ExportIOError",
    "LibraryReadError",
    "Library",
    "Playlist",
    "Track",
    "load_library",
    "PathNormalizer",
    "ResolvedTrack",
    "resolve_playlist",
    "PlaylistExporter",
    "PlaylistExportResult",
]
