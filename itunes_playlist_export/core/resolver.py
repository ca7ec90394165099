"""
Resolution of playlist track references to file locations.
"""

from dataclasses import dataclass
from typing import List, Optional

from .library import Library, Playlist, Track
from .paths import PathNormalizer


@dataclass(frozen=True)
class ResolvedTrack:
    """A playlist entry with its normalized location (``/`` separated)."""

    track: Track
    location: str


def build_normalizer(
    library: Library,
    music_path: Optional[str] = None,
    music_path_orig: Optional[str] = None,
) -> PathNormalizer:
    """
    Create the path normalizer for a library.

    Without an explicit original prefix the library's music folder is the one
    being replaced.
    """
    orig_prefix = music_path_orig or (library.music_folder if music_path else None)
    return PathNormalizer(orig_prefix, music_path)


def resolve_playlist(
    playlist: Playlist, library: Library, normalizer: PathNormalizer
) -> List[ResolvedTrack]:
    """
    Resolve a playlist's tracks to normalized locations, in playlist order.

    Raises:
        TrackReferenceError: If a referenced track is not in the library
    """
    return [
        ResolvedTrack(track=track, location=normalizer.normalize(track.location))
        for track in (
            library.get_track(track_id, playlist.name) for track_id in playlist.track_ids
        )
    ]
