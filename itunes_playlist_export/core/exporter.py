"""
Playlist export.

Writes one playlist file per selected playlist and, in copy mode, copies the
referenced media files into the output directory. Errors are fail-fast: the
first failing copy or write aborts the export. Media is copied before the
playlist file is written, so a playlist whose copies failed has no file,
while files copied before the failure stay in place.
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Set, Tuple

from ..utils.file_utils import copy_media_file, ensure_directory, numbered_path, sanitize_filename
from ..utils.logging import create_progress_logger, get_logger, log_success
from .config import Config
from .errors import ConfigurationError, ExportIOError, PlaylistSelectionError
from .formats import PlaylistEntry, get_writer
from .library import Library, Playlist
from .paths import to_native
from .resolver import ResolvedTrack, build_normalizer, resolve_playlist

logger = get_logger(__name__)

COPY_NONE = "NONE"
COPY_PLAYLIST = "PLAYLIST"
COPY_FLAT = "FLAT"


@dataclass
class PlaylistExportResult:
    """Result of exporting a single playlist."""

    playlist_name: str
    playlist_file: Path
    track_count: int
    copied_files: List[Path] = field(default_factory=list)
    dry_run: bool = False


class PlaylistExporter:
    """
    Exports the playlists of a library according to a configuration.
    """

    def __init__(self, library: Library, config: Config):
        """
        Initialize the exporter.

        Args:
            library: Loaded library
            config: Export configuration

        Raises:
            ConfigurationError: If the output format or copy mode is unknown
        """
        if not config.output_dir:
            raise ConfigurationError("No output directory configured")

        self.library = library
        self.config = config

        try:
            self.writer = get_writer(config.output_format)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

        self.copy_mode = config.copy_mode.upper()
        if self.copy_mode not in (COPY_NONE, COPY_PLAYLIST, COPY_FLAT):
            raise ConfigurationError(f"Unknown copy mode: {config.copy_mode}")

        # Copy-mode entries point into this directory and must be absolute
        self.output_dir = Path(config.output_dir).expanduser().absolute()
        self.separator = config.file_separator
        self.normalizer = build_normalizer(library, config.music_path, config.music_path_orig)
        logger.debug(f"Path rewriting: {self.normalizer}")

        # Copy destinations of this run: destination -> source, (folder, source) -> destination
        self._destinations: Dict[Path, str] = {}
        self._copies: Dict[Tuple[Path, str], Path] = {}
        self._used_stems: Set[str] = set()

    def select_playlists(self) -> List[Playlist]:
        """
        Select the playlists to export, in library order.

        Raises:
            PlaylistSelectionError: If a playlist requested by name does not exist
        """
        names = set(self.config.playlists)
        for name in self.config.playlists:
            if self.library.get_playlist(name) is None:
                raise PlaylistSelectionError(f"Playlist not found in library: {name}")

        pattern = re.compile(self.config.playlist_regex) if self.config.playlist_regex else None

        selected = []
        for playlist in self.library.playlists:
            if playlist.name in names:
                selected.append(playlist)
                continue

            if playlist.is_folder:
                continue
            if playlist.is_builtin and not self.config.include_builtin:
                continue

            if self.config.include_all or (pattern and pattern.search(playlist.name)):
                selected.append(playlist)

        return selected

    def export_all(self) -> List[PlaylistExportResult]:
        """
        Export every selected playlist.

        Raises:
            PlaylistSelectionError: If a requested playlist does not exist
            TrackReferenceError: If a playlist references an unknown track
            ExportIOError: If a directory, copy or playlist file cannot be written
        """
        playlists = self.select_playlists()
        if not playlists:
            logger.warning("No playlists selected for export")
            return []

        if not self.config.dry_run:
            try:
                ensure_directory(self.output_dir)
            except OSError as e:
                raise ExportIOError(
                    f"Cannot create output directory {self.output_dir}: {e}"
                ) from e

        results = []
        progress = create_progress_logger(len(playlists), "Exporting playlists")

        for playlist in playlists:
            result = self.export_playlist(playlist)
            results.append(result)
            progress.update(message=f"{playlist.name} ({result.track_count} tracks)")

        progress.finish(f"Exported {len(results)} playlists to {self.output_dir}")
        return results

    def export_playlist(self, playlist: Playlist) -> PlaylistExportResult:
        """
        Export a single playlist.

        Raises:
            TrackReferenceError: If the playlist references an unknown track
            ExportIOError: If a copy or the playlist file cannot be written
        """
        resolved = resolve_playlist(playlist, self.library, self.normalizer)
        stem = self._unique_stem(playlist.name)
        playlist_file = self.output_dir / self.writer.filename(stem)

        copied_files: List[Path] = []
        if self.copy_mode == COPY_NONE:
            entries = [
                PlaylistEntry(path=to_native(r.location, self.separator), track=r.track)
                for r in resolved
            ]
        else:
            copy_dir = self.output_dir / stem if self.copy_mode == COPY_PLAYLIST else self.output_dir
            entries, copied_files = self._copy_tracks(playlist, resolved, copy_dir)

        if self.config.dry_run:
            logger.info(f"Would write {playlist_file} ({len(entries)} tracks)")
        else:
            try:
                self.writer.write(playlist_file, playlist.name, entries)
            except OSError as e:
                raise ExportIOError(f"Cannot write playlist file {playlist_file}: {e}") from e
            log_success(logger, f"Wrote {playlist_file}")

        return PlaylistExportResult(
            playlist_name=playlist.name,
            playlist_file=playlist_file,
            track_count=len(entries),
            copied_files=copied_files,
            dry_run=self.config.dry_run,
        )

    def _unique_stem(self, playlist_name: str) -> str:
        stem = sanitize_filename(playlist_name)
        candidate = stem
        number = 2
        while candidate.lower() in self._used_stems:
            candidate = f"{stem} ({number})"
            number += 1
        if candidate != stem:
            logger.warning(f"Playlist name '{playlist_name}' already exported, using '{candidate}'")
        self._used_stems.add(candidate.lower())
        return candidate

    def _destination(self, copy_dir: Path, source: Path) -> Path:
        key = (copy_dir, str(source))
        if key in self._copies:
            return self._copies[key]

        destination = copy_dir / source.name
        number = 1
        while self._destinations.get(destination, str(source)) != str(source):
            destination = numbered_path(copy_dir / source.name, number)
            number += 1

        self._destinations[destination] = str(source)
        self._copies[key] = destination
        return destination

    def _copy_tracks(
        self, playlist: Playlist, resolved: List[ResolvedTrack], copy_dir: Path
    ) -> Tuple[List[PlaylistEntry], List[Path]]:
        entries = []
        copied_files = []

        for item in resolved:
            source = Path(item.location)
            already_copied = (copy_dir, str(source)) in self._copies
            destination = self._destination(copy_dir, source)

            if not already_copied:
                if self.config.dry_run:
                    logger.info(f"Would copy {source} -> {destination}")
                else:
                    try:
                        copy_media_file(source, destination)
                    except OSError as e:
                        raise ExportIOError(
                            f"Cannot copy '{source}' for playlist '{playlist.name}': {e}"
                        ) from e
                copied_files.append(destination)

            entries.append(
                PlaylistEntry(path=to_native(destination.as_posix(), self.separator), track=item.track)
            )

        return entries, copied_files
