"""
iTunes Playlist Export

Exports the playlists of an iTunes / Apple Music library file as M3U, PLS or
WPL playlists, optionally rewriting track paths and copying the media files.
"""

__version__ = "1.0.0"

from .core.config import Config
from .core.library import load_library
from .core.exporter import PlaylistExporter

__all__ = [
    "Config",
    "load_library",
    "PlaylistExporter",
]
