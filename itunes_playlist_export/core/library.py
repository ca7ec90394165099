"""
In-memory model of an iTunes library and its loader.

The library file (``Library.xml``) is an XML property list. Its top-level
dict holds a ``Tracks`` dict, keyed by track id, and a ``Playlists`` array
whose entries list their tracks under ``Playlist Items``. Only the fields
needed for exporting playlists are kept.
"""

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from lxml import etree

from ..utils.logging import get_logger, log_success, log_warning
from .errors import LibraryParseError, LibraryReadError, TrackReferenceError

logger = get_logger(__name__)

MISSING_TRACKS_ERROR = "error"
MISSING_TRACKS_SKIP = "skip"


@dataclass(frozen=True)
class Track:
    """A single media item of the library."""

    track_id: str
    location: str
    name: Optional[str] = None
    artist: Optional[str] = None
    album: Optional[str] = None
    total_time: Optional[int] = None  # milliseconds
    kind: Optional[str] = None

    @property
    def title(self) -> str:
        """Display title in the usual ``Artist - Name`` form."""
        name = self.name or Path(self.location.replace("\\", "/")).stem
        if self.artist:
            return f"{self.artist} - {name}"
        return name

    @property
    def duration_seconds(self) -> int:
        """Length in whole seconds, -1 when unknown."""
        if self.total_time is None:
            return -1
        return self.total_time // 1000


@dataclass(frozen=True)
class Playlist:
    """A named, ordered list of track references."""

    name: str
    track_ids: Tuple[str, ...] = ()
    playlist_id: Optional[str] = None
    persistent_id: Optional[str] = None
    parent_persistent_id: Optional[str] = None
    is_folder: bool = False
    is_master: bool = False
    distinguished_kind: Optional[int] = None
    is_smart: bool = False

    @property
    def is_builtin(self) -> bool:
        """The master library or one of the playlists iTunes manages itself."""
        return self.is_master or self.distinguished_kind is not None

    def __len__(self) -> int:
        return len(self.track_ids)


@dataclass
class Library:
    """Tracks by id and playlists in library order."""

    tracks: Dict[str, Track] = field(default_factory=dict)
    playlists: List[Playlist] = field(default_factory=list)
    music_folder: Optional[str] = None
    source_path: Optional[Path] = None

    def get_track(self, track_id: str, playlist_name: str = "") -> Track:
        """
        Look up a track by id.

        Raises:
            TrackReferenceError: If the track is not in the library
        """
        try:
            return self.tracks[track_id]
        except KeyError:
            raise TrackReferenceError(playlist_name, track_id) from None

    def get_playlist(self, name: str) -> Optional[Playlist]:
        """Return the first playlist with the given name, if any."""
        for playlist in self.playlists:
            if playlist.name == name:
                return playlist
        return None

    def check_references(self) -> None:
        """
        Verify that every playlist only references known tracks.

        Raises:
            TrackReferenceError: For the first unknown reference found
        """
        for playlist in self.playlists:
            for track_id in playlist.track_ids:
                if track_id not in self.tracks:
                    raise TrackReferenceError(playlist.name, track_id)


# Property list decoding


def _children(element: Any) -> List[Any]:
    # Skips comments and processing instructions
    return [child for child in element if isinstance(child.tag, str)]


def _plist_value(element: Any) -> Any:
    """Convert a property list element into the matching Python value."""
    tag = element.tag

    if tag == "dict":
        children = _children(element)
        if len(children) % 2:
            raise LibraryParseError(f"Unbalanced <dict> on line {element.sourceline}")
        result = {}
        for key_el, value_el in zip(children[::2], children[1::2]):
            if key_el.tag != "key":
                raise LibraryParseError(
                    f"Expected <key> but found <{key_el.tag}> on line {key_el.sourceline}"
                )
            result[key_el.text or ""] = _plist_value(value_el)
        return result
    if tag == "array":
        return [_plist_value(child) for child in _children(element)]
    if tag in ("string", "date", "data"):
        return element.text or ""
    if tag == "integer":
        try:
            return int((element.text or "").strip())
        except ValueError:
            raise LibraryParseError(
                f"Invalid <integer> '{element.text}' on line {element.sourceline}"
            ) from None
    if tag == "real":
        try:
            return float((element.text or "").strip())
        except ValueError:
            raise LibraryParseError(
                f"Invalid <real> '{element.text}' on line {element.sourceline}"
            ) from None
    if tag == "true":
        return True
    if tag == "false":
        return False

    raise LibraryParseError(f"Unexpected element <{tag}> on line {element.sourceline}")


def _read_plist(path: Path) -> Dict[str, Any]:
    parser = etree.XMLParser(
        resolve_entities=False, no_network=True, huge_tree=True, remove_comments=True
    )

    try:
        with open(path, "rb") as f:
            tree = etree.parse(f, parser)
    except OSError as e:
        raise LibraryReadError(f"Cannot read library file {path}: {e}") from e
    except etree.XMLSyntaxError as e:
        raise LibraryParseError(f"Library file {path} is not well-formed XML: {e}") from e

    root = tree.getroot()
    if root.tag != "plist":
        raise LibraryParseError(f"Expected a <plist> document, found <{root.tag}>")

    children = _children(root)
    if len(children) != 1 or children[0].tag != "dict":
        raise LibraryParseError("Property list must contain a single top-level <dict>")

    return _plist_value(children[0])


# Entity construction


def _optional_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def _parse_track(key: str, data: Any, missing_tracks: str) -> Optional[Track]:
    if not isinstance(data, dict):
        raise LibraryParseError(f"Track entry '{key}' is not a dict")

    if "Track ID" not in data:
        raise LibraryParseError(f"Track entry '{key}' has no 'Track ID'")
    track_id = str(data["Track ID"])

    location = data.get("Location")
    if not location:
        if missing_tracks == MISSING_TRACKS_SKIP:
            log_warning(logger, f"Skipping track {track_id} without a location")
            return None
        raise LibraryParseError(f"Track {track_id} has no 'Location'")

    total_time = data.get("Total Time")
    return Track(
        track_id=track_id,
        location=location,
        name=_optional_str(data.get("Name")),
        artist=_optional_str(data.get("Artist")),
        album=_optional_str(data.get("Album")),
        total_time=total_time if isinstance(total_time, int) else None,
        kind=_optional_str(data.get("Kind")),
    )


def _parse_playlist(index: int, data: Any) -> Playlist:
    if not isinstance(data, dict):
        raise LibraryParseError(f"Playlist entry {index} is not a dict")

    name = data.get("Name")
    if not isinstance(name, str) or not name:
        raise LibraryParseError(f"Playlist entry {index} has no 'Name'")

    track_ids = []
    for item in data.get("Playlist Items", []):
        if not isinstance(item, dict) or "Track ID" not in item:
            raise LibraryParseError(f"Playlist '{name}' has an item without 'Track ID'")
        track_ids.append(str(item["Track ID"]))

    distinguished_kind = data.get("Distinguished Kind")
    return Playlist(
        name=name,
        track_ids=tuple(track_ids),
        playlist_id=_optional_str(data.get("Playlist ID")),
        persistent_id=_optional_str(data.get("Playlist Persistent ID")),
        parent_persistent_id=_optional_str(data.get("Parent Persistent ID")),
        is_folder=bool(data.get("Folder", False)),
        is_master=bool(data.get("Master", False)),
        distinguished_kind=distinguished_kind if isinstance(distinguished_kind, int) else None,
        is_smart="Smart Info" in data,
    )


def _drop_unknown_references(playlist: Playlist, tracks: Dict[str, Track]) -> Playlist:
    known = []
    for track_id in playlist.track_ids:
        if track_id in tracks:
            known.append(track_id)
        else:
            log_warning(
                logger,
                f"Skipping unknown track id {track_id} in playlist '{playlist.name}'",
            )
    if len(known) == len(playlist.track_ids):
        return playlist
    return replace(playlist, track_ids=tuple(known))


def load_library(
    path: Union[str, Path], missing_tracks: str = MISSING_TRACKS_ERROR
) -> Library:
    """
    Load an iTunes library file.

    Args:
        path: Path to the ``Library.xml`` file
        missing_tracks: ``"error"`` to fail on tracks without a location and on
            references to unknown tracks, ``"skip"`` to drop them with a warning

    Returns:
        Loaded library

    Raises:
        LibraryReadError: If the file cannot be read
        LibraryParseError: If the file is malformed or misses required fields
        TrackReferenceError: If a playlist references an unknown track
    """
    library_path = Path(path).expanduser()
    missing_tracks = missing_tracks.lower()
    if missing_tracks not in (MISSING_TRACKS_ERROR, MISSING_TRACKS_SKIP):
        raise ValueError(f"Unknown missing track policy: {missing_tracks}")

    logger.info(f"Loading library: {library_path}")
    document = _read_plist(library_path)

    tracks_data = document.get("Tracks")
    if not isinstance(tracks_data, dict):
        raise LibraryParseError("Library has no 'Tracks' dict")

    playlists_data = document.get("Playlists")
    if not isinstance(playlists_data, list):
        raise LibraryParseError("Library has no 'Playlists' array")

    tracks: Dict[str, Track] = {}
    for key, data in tracks_data.items():
        track = _parse_track(key, data, missing_tracks)
        if track is not None:
            tracks[track.track_id] = track

    playlists = [_parse_playlist(i, data) for i, data in enumerate(playlists_data)]

    if missing_tracks == MISSING_TRACKS_SKIP:
        playlists = [_drop_unknown_references(p, tracks) for p in playlists]

    library = Library(
        tracks=tracks,
        playlists=playlists,
        music_folder=_optional_str(document.get("Music Folder")),
        source_path=library_path,
    )
    library.check_references()

    log_success(
        logger, f"Loaded {len(tracks)} tracks and {len(playlists)} playlists"
    )
    return library
