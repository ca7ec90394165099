"""
Playlist file writers.

Each writer renders an ordered list of entries into one playlist format.
Text formats are written in text mode, so lines end with the host's line
terminator.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Type

from lxml import etree

from .. import __version__
from .library import Track


@dataclass(frozen=True)
class PlaylistEntry:
    """A line of the playlist: the path to write and the track behind it."""

    path: str
    track: Track


class PlaylistWriter(ABC):
    """Base class for playlist formats."""

    name: str = ""
    extension: str = ""

    def filename(self, stem: str) -> str:
        return f"{stem}.{self.extension}"

    @abstractmethod
    def write(self, path: Path, playlist_name: str, entries: List[PlaylistEntry]) -> None:
        """Write the playlist file."""
        pass


class TextPlaylistWriter(PlaylistWriter):
    """Writer for line-based formats."""

    def write(self, path: Path, playlist_name: str, entries: List[PlaylistEntry]) -> None:
        lines = self.render(playlist_name, entries)
        with open(path, "w", encoding="utf-8") as f:
            for line in lines:
                f.write(line + "\n")

    @abstractmethod
    def render(self, playlist_name: str, entries: List[PlaylistEntry]) -> List[str]:
        pass


class M3UWriter(TextPlaylistWriter):
    """M3U: ``#EXTM3U`` header followed by one path per line."""

    name = "M3U"
    extension = "m3u"

    def render(self, playlist_name: str, entries: List[PlaylistEntry]) -> List[str]:
        return ["#EXTM3U"] + [entry.path for entry in entries]


class ExtendedM3UWriter(TextPlaylistWriter):
    """Extended M3U with an ``#EXTINF`` line per track."""

    name = "EXT"
    extension = "m3u"

    def render(self, playlist_name: str, entries: List[PlaylistEntry]) -> List[str]:
        lines = ["#EXTM3U"]
        for entry in entries:
            lines.append(f"#EXTINF:{entry.track.duration_seconds},{entry.track.title}")
            lines.append(entry.path)
        return lines


class PLSWriter(TextPlaylistWriter):
    """PLS version 2."""

    name = "PLS"
    extension = "pls"

    def render(self, playlist_name: str, entries: List[PlaylistEntry]) -> List[str]:
        lines = ["[playlist]"]
        for number, entry in enumerate(entries, start=1):
            lines.append(f"File{number}={entry.path}")
            lines.append(f"Title{number}={entry.track.title}")
            lines.append(f"Length{number}={entry.track.duration_seconds}")
        lines.append(f"NumberOfEntries={len(entries)}")
        lines.append("Version=2")
        return lines


class WPLWriter(PlaylistWriter):
    """Windows Media Player playlist."""

    name = "WPL"
    extension = "wpl"

    def write(self, path: Path, playlist_name: str, entries: List[PlaylistEntry]) -> None:
        smil = etree.Element("smil")
        head = etree.SubElement(smil, "head")
        etree.SubElement(
            head,
            "meta",
            name="Generator",
            content=f"itunes-playlist-export -- {__version__}",
        )
        etree.SubElement(head, "meta", name="ItemCount", content=str(len(entries)))
        etree.SubElement(head, "title").text = playlist_name

        seq = etree.SubElement(etree.SubElement(smil, "body"), "seq")
        for entry in entries:
            etree.SubElement(seq, "media", src=entry.path)

        with open(path, "wb") as f:
            f.write(b'<?wpl version="1.0"?>\n')
            f.write(etree.tostring(smil, pretty_print=True, encoding="utf-8"))


WRITERS: Dict[str, Type[PlaylistWriter]] = {
    writer.name: writer
    for writer in (M3UWriter, ExtendedM3UWriter, PLSWriter, WPLWriter)
}


def get_writer(output_format: str) -> PlaylistWriter:
    """
    Get the writer for a format name (case-insensitive).

    Raises:
        ValueError: If the format is unknown
    """
    try:
        return WRITERS[output_format.upper()]()
    except KeyError:
        raise ValueError(
            f"Unknown output format: {output_format}. Must be one of {', '.join(WRITERS)}"
        ) from None
