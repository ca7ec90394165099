"""
Command implementations for the CLI interface.

Provides concrete command classes for the export and list operations.
"""

import argparse
from abc import ABC, abstractmethod

from ..utils.logging import get_logger, log_error, log_success
from ..utils.validation import (
    COPY_MODES,
    MISSING_TRACK_POLICIES,
    OUTPUT_FORMATS,
    validate_file_path,
    validate_regex,
)
from ..core.config import Config
from ..core.errors import ConfigurationError, PlaylistExportError
from ..core.exporter import PlaylistExporter
from ..core.library import load_library

logger = get_logger(__name__)


def _upper(value: str) -> str:
    return value.upper()


class BaseCommand(ABC):
    """Base class for CLI commands."""

    def __init__(self, config: Config):
        """
        Initialize command with configuration.

        Args:
            config: Configuration object
        """
        self.config = config

    @staticmethod
    @abstractmethod
    def setup_parser(parser: argparse.ArgumentParser) -> None:
        """Set up argument parser for this command."""
        pass

    @staticmethod
    @abstractmethod
    def validate_args(args: argparse.Namespace) -> bool:
        """Validate command-specific arguments."""
        pass

    @abstractmethod
    def run(self, args: argparse.Namespace) -> int:
        """Run the command and return exit code."""
        pass

    def execute(self, args: argparse.Namespace) -> int:
        """Execute the command, turning export errors into an exit code."""
        try:
            return self.run(args)
        except PlaylistExportError as e:
            log_error(logger, str(e))
            return 1

    @staticmethod
    def _validate_library_arg(args: argparse.Namespace) -> bool:
        if args.library:
            is_valid, error = validate_file_path(args.library)
            if not is_valid:
                logger.error(f"Library file: {error}")
                return False
        return True


class ExportCommand(BaseCommand):
    """Command for exporting playlists."""

    @staticmethod
    def setup_parser(parser: argparse.ArgumentParser) -> None:
        """Set up export command parser."""
        parser.add_argument("--library", "-l", type=str, help="iTunes library XML file")
        parser.add_argument("--output", "-o", type=str, help="Output directory")
        parser.add_argument(
            "--type",
            "-t",
            type=_upper,
            choices=OUTPUT_FORMATS,
            help="Playlist format (default: M3U)",
        )

        selection = parser.add_argument_group("playlist selection")
        selection.add_argument(
            "--include-all",
            "-a",
            action="store_true",
            help="Export all playlists except folders and built-in playlists",
        )
        selection.add_argument(
            "--playlist",
            "-p",
            action="append",
            metavar="NAME",
            help="Export the named playlist (repeatable)",
        )
        selection.add_argument(
            "--playlist-regex", type=str, help="Export playlists whose name matches"
        )
        selection.add_argument(
            "--include-builtin",
            action="store_true",
            help="Also export built-in playlists (Library, Music, Movies, ...)",
        )

        paths = parser.add_argument_group("track paths")
        paths.add_argument(
            "--copy",
            type=_upper,
            choices=COPY_MODES,
            help="Copy music files: NONE, PLAYLIST (one folder per playlist) or FLAT",
        )
        paths.add_argument(
            "--music-path",
            type=str,
            help="New music folder to use in place of the original one",
        )
        paths.add_argument(
            "--music-path-orig",
            type=str,
            help="Original music folder to replace (default: library's music folder)",
        )
        paths.add_argument(
            "--file-separator",
            choices=["/", "\\"],
            help="Path separator used in playlist files (default: system separator)",
        )
        paths.add_argument(
            "--on-missing",
            choices=MISSING_TRACK_POLICIES,
            help="What to do with tracks that have no file or are unknown (default: error)",
        )

    @staticmethod
    def validate_args(args: argparse.Namespace) -> bool:
        """Validate export command arguments."""
        if not BaseCommand._validate_library_arg(args):
            return False

        if args.playlist_regex:
            is_valid, error = validate_regex(args.playlist_regex)
            if not is_valid:
                logger.error(error)
                return False

        return True

    def run(self, args: argparse.Namespace) -> int:
        """Export the selected playlists."""
        self.config.check_export_ready()

        library = load_library(self.config.library_path, self.config.missing_tracks)
        exporter = PlaylistExporter(library, self.config)
        results = exporter.export_all()

        copied = sum(len(r.copied_files) for r in results)
        tracks = sum(r.track_count for r in results)

        print("\nExport Summary:")
        print(f"Playlists: {len(results)}")
        print(f"Tracks: {tracks}")
        if exporter.copy_mode != "NONE":
            print(f"Files copied: {copied}")
        for result in results:
            print(f"  - {result.playlist_name}: {result.track_count} tracks -> {result.playlist_file}")

        if self.config.dry_run:
            logger.info("Dry run, no files were written")
        else:
            log_success(logger, f"Exported {len(results)} playlists")
        return 0


class ListCommand(BaseCommand):
    """Command for listing the playlists of a library."""

    @staticmethod
    def setup_parser(parser: argparse.ArgumentParser) -> None:
        """Set up list command parser."""
        parser.add_argument("--library", "-l", type=str, help="iTunes library XML file")
        parser.add_argument(
            "--filter", type=str, help="Filter playlists by name (case-insensitive)"
        )
        parser.add_argument(
            "--include-builtin",
            action="store_true",
            help="Also show built-in playlists",
        )

    @staticmethod
    def validate_args(args: argparse.Namespace) -> bool:
        """Validate list command arguments."""
        return BaseCommand._validate_library_arg(args)

    def run(self, args: argparse.Namespace) -> int:
        """Print the playlists of the library."""
        if not self.config.library_path:
            raise ConfigurationError("No library file given")

        library = load_library(self.config.library_path, self.config.missing_tracks)

        playlists = library.playlists
        if not self.config.include_builtin:
            playlists = [p for p in playlists if not p.is_builtin]
        if args.filter:
            filter_term = args.filter.lower()
            playlists = [p for p in playlists if filter_term in p.name.lower()]

        print(f"\niTunes Playlists ({len(playlists)} found):")
        print("-" * 60)

        for playlist in playlists:
            if playlist.is_folder:
                playlist_type = "Folder"
            elif playlist.is_builtin:
                playlist_type = "Built-in"
            elif playlist.is_smart:
                playlist_type = "Smart"
            else:
                playlist_type = "Regular"

            print(f"{playlist.name}")
            print(f"  Type: {playlist_type}")
            print(f"  Tracks: {len(playlist)}")
            if playlist.persistent_id:
                print(f"  ID: {playlist.persistent_id}")
            print()

        return 0
