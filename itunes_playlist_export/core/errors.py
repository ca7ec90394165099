"""
Exceptions raised while loading a library and exporting its playlists.
"""


class PlaylistExportError(Exception):
    """Base exception for all export operations."""

    pass


class ConfigurationError(PlaylistExportError):
    """Raised when the export configuration is incomplete or invalid."""

    pass


class LibraryParseError(PlaylistExportError):
    """Raised when the library file is malformed or misses required fields."""

    pass


class TrackReferenceError(PlaylistExportError):
    """Raised when a playlist references a track that is not in the library."""

    def __init__(self, playlist_name: str, track_id: str):
        self.playlist_name = playlist_name
        self.track_id = track_id
        super().__init__(
            f"Playlist '{playlist_name}' references unknown track id {track_id}"
        )


class PlaylistSelectionError(PlaylistExportError):
    """Raised when a requested playlist does not exist in the library."""

    pass


class ExportIOError(PlaylistExportError):
    """Raised when reading, writing or copying a file fails."""

    pass


class LibraryReadError(ExportIOError):
    """Raised when the library file cannot be read."""

    pass
