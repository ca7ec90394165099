"""
Pytest configuration and shared fixtures for the playlist export tests.
"""

from pathlib import Path
from xml.sax.saxutils import escape

import pytest

FIXTURES_DIR = Path(__file__).parent / "fixtures"
EXAMPLE_LIBRARY = FIXTURES_DIR / "example-itunes-db.xml"
LOCATION_PLACEHOLDER = "REPLACE_ME_EXAMPLE_SONG_LOCATION"
FILE_CONTENT = "42"


def _value(value):
    if value is True:
        return "<true/>"
    if value is False:
        return "<false/>"
    if isinstance(value, int):
        return f"<integer>{value}</integer>"
    return f"<string>{escape(str(value))}</string>"


def _dict(entries):
    body = "".join(f"<key>{escape(k)}</key>{_value(v)}" for k, v in entries.items())
    return f"<dict>{body}</dict>"


def build_library_xml(tracks, playlists, music_folder=None):
    """
    Build an iTunes library document.

    ``tracks`` maps track ids to a dict of track keys (``Location``, ``Name``,
    ...); ``playlists`` is a list of dicts with the playlist keys and an
    ``items`` list of track ids.
    """
    parts = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<!DOCTYPE plist PUBLIC "-//Apple Computer//DTD PLIST 1.0//EN" '
        '"http://www.apple.com/DTDs/PropertyList-1.0.dtd">',
        '<plist version="1.0"><dict>',
        "<key>Major Version</key><integer>1</integer>",
    ]
    if music_folder:
        parts.append(f"<key>Music Folder</key>{_value(music_folder)}")

    parts.append("<key>Tracks</key><dict>")
    for track_id, data in tracks.items():
        entries = {"Track ID": int(track_id)}
        entries.update(data)
        parts.append(f"<key>{track_id}</key>{_dict(entries)}")
    parts.append("</dict>")

    parts.append("<key>Playlists</key><array>")
    for playlist in playlists:
        playlist = dict(playlist)
        items = playlist.pop("items", [])
        body = "".join(f"<key>{escape(k)}</key>{_value(v)}" for k, v in playlist.items())
        item_dicts = "".join(_dict({"Track ID": int(i)}) for i in items)
        parts.append(f"<dict>{body}<key>Playlist Items</key><array>{item_dicts}</array></dict>")
    parts.append("</array>")

    parts.append("</dict></plist>")
    return "\n".join(parts)


@pytest.fixture
def music_dir(tmp_path):
    """Directory holding the source media files."""
    path = tmp_path / "music"
    path.mkdir()
    return path


@pytest.fixture
def output_dir(tmp_path):
    """Export target directory (not created yet)."""
    return tmp_path / "output"


@pytest.fixture
def music_file(music_dir):
    """A fake mp3 file with known content."""
    path = music_dir / "Some_Song_123.mp3"
    path.write_text(FILE_CONTENT)
    return path


@pytest.fixture
def example_library_file(tmp_path):
    """Write the example library with its single track pointing at a location."""

    def _write(location: str) -> Path:
        content = EXAMPLE_LIBRARY.read_text(encoding="utf-8")
        library_file = tmp_path / "testItunesDb.xml"
        library_file.write_text(
            content.replace(LOCATION_PLACEHOLDER, escape(location)), encoding="utf-8"
        )
        return library_file

    return _write


@pytest.fixture
def library_file(tmp_path):
    """Write a library built from tracks and playlists."""

    def _write(tracks, playlists, music_folder=None, name="Library.xml") -> Path:
        path = tmp_path / name
        path.write_text(build_library_xml(tracks, playlists, music_folder), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def media_files(music_dir):
    """Create several media files and return their paths by short name."""

    def _create(*names):
        files = {}
        for name in names:
            path = music_dir / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(f"content of {name}".encode("utf-8"))
            files[name] = path
        return files

    return _create
