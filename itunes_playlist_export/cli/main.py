"""
Main CLI interface for iTunes Playlist Export.

Provides a unified command-line interface for exporting and listing playlists.
"""

import sys
import argparse
from pathlib import Path
from typing import Optional, List

from .. import __version__
from ..utils.logging import setup_logging, get_logger, log_exception
from ..core.config import Config, load_config, find_config_file
from ..core.errors import PlaylistExportError
from .commands import ExportCommand, ListCommand

logger = get_logger(__name__)

# Command-line argument -> configuration key
ARGUMENT_OVERRIDES = {
    "library": "library_path",
    "output": "output_dir",
    "type": "output_format",
    "include_all": "include_all",
    "playlist": "playlists",
    "playlist_regex": "playlist_regex",
    "include_builtin": "include_builtin",
    "copy": "copy_mode",
    "music_path": "music_path",
    "music_path_orig": "music_path_orig",
    "file_separator": "file_separator",
    "on_missing": "missing_tracks",
}


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="itunes-playlist-export",
        description="Export iTunes / Apple Music playlists as M3U, PLS or WPL files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Export all playlists as M3U files
  itunes-playlist-export export -l Library.xml -o playlists --include-all

  # Export one playlist and copy its music next to it
  itunes-playlist-export export -l Library.xml -o out -p "Road Trip" --copy PLAYLIST

  # Point the playlists at a different music folder
  itunes-playlist-export export -l Library.xml -o out -a \\
      --music-path-orig /Users/me/Music --music-path /mnt/music

  # Show the playlists of a library
  itunes-playlist-export list -l Library.xml
        """,
    )

    # Global options
    parser.add_argument(
        "--config", "-c", type=str, help="Path to configuration file (JSON or TOML)"
    )

    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    parser.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Quiet mode (warnings and errors only)",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be done without writing any files",
    )

    parser.add_argument("--log-file", type=str, help="Log to file in addition to console")

    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    # Subcommands
    subparsers = parser.add_subparsers(dest="command", help="Available commands", metavar="COMMAND")

    export_parser = subparsers.add_parser(
        "export", help="Export playlists to playlist files", aliases=["ex"]
    )
    ExportCommand.setup_parser(export_parser)

    list_parser = subparsers.add_parser(
        "list", help="List the playlists of a library", aliases=["ls"]
    )
    ListCommand.setup_parser(list_parser)

    return parser


def load_configuration(args: argparse.Namespace) -> Config:
    """
    Load configuration from various sources.

    Args:
        args: Parsed command-line arguments

    Returns:
        Loaded configuration object

    Raises:
        PlaylistExportError: If an explicitly given configuration file is missing
    """
    config_file = None
    if args.config:
        config_file = Path(args.config)
        if not config_file.exists():
            raise PlaylistExportError(f"Configuration file not found: {config_file}")
    else:
        config_file = find_config_file()
        if config_file:
            logger.info(f"Using configuration file: {config_file}")

    overrides = {}
    if args.dry_run:
        overrides["dry_run"] = True
    if args.verbose:
        overrides["verbose"] = True
        overrides["log_level"] = "DEBUG"
    if args.quiet:
        overrides["log_level"] = "WARNING"
    if args.log_file:
        overrides["log_file"] = args.log_file

    for argument, config_key in ARGUMENT_OVERRIDES.items():
        value = getattr(args, argument, None)
        if value is not None and value is not False:
            overrides[config_key] = value

    return load_config(config_file=config_file, **overrides)


def setup_logging_from_config(config: Config) -> None:
    """Set up logging based on configuration."""
    setup_logging(
        level=config.log_level,
        log_file=config.log_file,
        console=True,
        include_timestamp=True,
    )


def validate_args(args: argparse.Namespace) -> bool:
    """
    Validate command-line arguments.

    Args:
        args: Parsed arguments

    Returns:
        True if arguments are valid, False otherwise
    """
    if args.verbose and args.quiet:
        logger.error("Cannot use both --verbose and --quiet options")
        return False

    if args.command in ["export", "ex"]:
        return ExportCommand.validate_args(args)
    elif args.command in ["list", "ls"]:
        return ListCommand.validate_args(args)

    return True


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (uses sys.argv if None)

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        config = load_configuration(args)

        setup_logging_from_config(config)

        if not validate_args(args):
            return 1

        logger.info("Starting iTunes Playlist Export")
        logger.debug(f"Command: {args.command}")
        logger.debug(str(config))

        if args.command in ["export", "ex"]:
            exit_code = ExportCommand(config).execute(args)
        elif args.command in ["list", "ls"]:
            exit_code = ListCommand(config).execute(args)
        else:
            logger.error(f"Unknown command: {args.command}")
            exit_code = 1

        if exit_code == 0:
            logger.info("Operation completed successfully")
        else:
            logger.error("Operation failed")

        return exit_code

    except KeyboardInterrupt:
        logger.info("Operation cancelled by user")
        return 130  # Standard exit code for SIGINT
    except PlaylistExportError as e:
        logger.error(str(e))
        return 1
    except Exception as e:
        log_exception(logger, e, f"command {args.command}")
        return 1


def cli_main() -> None:
    """Entry point for console script."""
    sys.exit(main())


if __name__ == "__main__":
    cli_main()
