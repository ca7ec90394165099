"""
Configuration management for iTunes Playlist Export.

Provides centralized configuration handling with support for:
- Environment variables
- Configuration files (JSON/TOML)
- Command-line overrides
- Default values
"""

import os
import json
import toml
from pathlib import Path
from typing import Dict, Any, Iterable, List, Optional, Union
from dataclasses import dataclass, field, fields
import logging

from ..utils.validation import validate_export_settings
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

BOOL_KEYS = {"include_all", "include_builtin", "dry_run", "verbose"}


@dataclass
class Config:
    """Export configuration with default values and validation."""

    # Paths
    library_path: Optional[str] = None
    output_dir: Optional[str] = None

    # Playlist selection
    include_all: bool = False
    playlists: List[str] = field(default_factory=list)
    playlist_regex: Optional[str] = None
    include_builtin: bool = False

    # Output
    output_format: str = "M3U"
    copy_mode: str = "NONE"
    file_separator: str = field(default_factory=lambda: os.sep)

    # Path rewriting
    music_path: Optional[str] = None
    music_path_orig: Optional[str] = None

    # Processing settings
    missing_tracks: str = "error"
    dry_run: bool = False
    verbose: bool = False

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @classmethod
    def from_file(cls, config_path: Union[str, Path]) -> "Config":
        """
        Load configuration from a file (JSON or TOML).

        Raises:
            ConfigurationError: If the file cannot be parsed
        """
        return cls.from_dict(cls.read_file(config_path))

    @staticmethod
    def read_file(config_path: Union[str, Path]) -> Dict[str, Any]:
        """
        Read the settings stored in a configuration file.

        Returns:
            The keys the file sets, empty if the file does not exist

        Raises:
            ConfigurationError: If the file cannot be parsed
        """
        config_path = Path(config_path)

        if not config_path.exists():
            logger.warning(f"Configuration file not found: {config_path}")
            return {}

        try:
            if config_path.suffix.lower() == ".json":
                with open(config_path, "r", encoding="utf-8") as f:
                    config_data = json.load(f)
            elif config_path.suffix.lower() == ".toml":
                config_data = toml.load(config_path)
            else:
                raise ConfigurationError(
                    f"Unsupported configuration file format: {config_path.suffix}"
                )
        except (json.JSONDecodeError, toml.TomlDecodeError) as e:
            raise ConfigurationError(
                f"Error parsing configuration file {config_path}: {e}"
            ) from e
        except OSError as e:
            raise ConfigurationError(
                f"Error loading configuration file {config_path}: {e}"
            ) from e

        if not isinstance(config_data, dict):
            raise ConfigurationError(f"Configuration file {config_path} must hold a table")

        return config_data

    @classmethod
    def from_dict(cls, config_data: Dict[str, Any]) -> "Config":
        """Create Config instance from dictionary."""
        config = cls()

        for key, value in config_data.items():
            if hasattr(config, key):
                if key == "playlists" and isinstance(value, str):
                    setattr(config, key, [value])
                elif key == "playlists" and value is not None:
                    setattr(config, key, list(value))
                else:
                    setattr(config, key, value)
            else:
                logger.warning(f"Unknown configuration key: {key}")

        return config

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        return cls.from_dict(cls.read_env())

    @staticmethod
    def read_env() -> Dict[str, Any]:
        """Read the settings set through ITUNES_EXPORT_* environment variables."""
        env_data: Dict[str, Any] = {}

        env_mapping = {
            "ITUNES_EXPORT_LIBRARY": "library_path",
            "ITUNES_EXPORT_OUTPUT": "output_dir",
            "ITUNES_EXPORT_TYPE": "output_format",
            "ITUNES_EXPORT_COPY": "copy_mode",
            "ITUNES_EXPORT_INCLUDE_ALL": "include_all",
            "ITUNES_EXPORT_MUSIC_PATH": "music_path",
            "ITUNES_EXPORT_MUSIC_PATH_ORIG": "music_path_orig",
            "ITUNES_EXPORT_ON_MISSING": "missing_tracks",
            "ITUNES_EXPORT_DRY_RUN": "dry_run",
            "ITUNES_EXPORT_LOG_LEVEL": "log_level",
            "ITUNES_EXPORT_LOG_FILE": "log_file",
        }

        for env_var, config_key in env_mapping.items():
            value = os.getenv(env_var)
            if value is not None:
                if config_key in BOOL_KEYS:
                    env_data[config_key] = value.lower() in ("true", "1", "yes", "on")
                else:
                    env_data[config_key] = value

        return env_data

    def merge_with(self, other: "Config", keys: Optional[Iterable[str]] = None) -> "Config":
        """
        Merge this configuration with another, giving priority to the other.

        Args:
            other: Configuration whose values win
            keys: Settings the other configuration was given explicitly. Without
                them, only values that differ from the defaults are taken over.
        """
        merged_data = self.to_dict()
        names = {f.name for f in fields(self)}

        if keys is None:
            defaults = Config()
            keys = [name for name in names if getattr(other, name) != getattr(defaults, name)]

        for key in keys:
            if key in names:
                merged_data[key] = getattr(other, key)

        return Config.from_dict(merged_data)

    def validate(self) -> bool:
        """Validate configuration values, logging every problem found."""
        is_valid, errors = validate_export_settings(self.to_dict())
        for error in errors:
            logger.error(error)
        return is_valid

    def check_export_ready(self) -> None:
        """
        Make sure everything an export needs is configured.

        Raises:
            ConfigurationError: Listing every missing or invalid setting
        """
        problems = []
        if not self.library_path:
            problems.append("no library file given")
        if not self.output_dir:
            problems.append("no output directory given")
        if not (self.include_all or self.playlists or self.playlist_regex):
            problems.append("no playlists selected")

        is_valid, errors = validate_export_settings(self.to_dict())
        problems.extend(errors)

        if problems:
            raise ConfigurationError("Invalid export configuration: " + "; ".join(problems))

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        result = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, list):
                value = list(value)
            result[f.name] = value
        return result

    def save_to_file(self, config_path: Union[str, Path]) -> bool:
        """Save configuration to file."""
        config_path = Path(config_path)

        # Neither JSON nor TOML handle unset values the same way
        config_data = {k: v for k, v in self.to_dict().items() if v is not None}

        try:
            if config_path.suffix.lower() == ".json":
                with open(config_path, "w", encoding="utf-8") as f:
                    json.dump(config_data, f, indent=2)
            elif config_path.suffix.lower() == ".toml":
                with open(config_path, "w", encoding="utf-8") as f:
                    toml.dump(config_data, f)
            else:
                logger.error(f"Unsupported configuration file format: {config_path.suffix}")
                return False

            logger.info(f"Configuration saved to: {config_path}")
            return True

        except OSError as e:
            logger.error(f"Error saving configuration to {config_path}: {e}")
            return False

    def __str__(self) -> str:
        """String representation of configuration."""
        lines = ["Configuration:"]
        for name in sorted(f.name for f in fields(self)):
            lines.append(f"  {name}: {getattr(self, name)}")
        return "\n".join(lines)


def load_config(
    config_file: Optional[Union[str, Path]] = None, use_env: bool = True, **overrides
) -> Config:
    """
    Load configuration from multiple sources with precedence:
    1. Command-line overrides (highest priority)
    2. Configuration file
    3. Environment variables
    4. Defaults (lowest priority)
    """
    config = Config()

    if use_env:
        env_data = Config.read_env()
        config = config.merge_with(Config.from_dict(env_data), keys=env_data)

    if config_file:
        file_data = Config.read_file(config_file)
        config = config.merge_with(Config.from_dict(file_data), keys=file_data)

    if overrides:
        config = config.merge_with(Config.from_dict(overrides), keys=overrides)

    if not config.validate():
        logger.warning("Configuration validation failed, some features may not work correctly")

    return config


def get_default_config_paths() -> List[Path]:
    """Get list of default configuration file locations to search."""
    return [
        Path.cwd() / ".itunes-export.toml",
        Path.cwd() / ".itunes-export.json",
        Path.home() / ".config" / "itunes-playlist-export" / "config.toml",
        Path.home() / ".config" / "itunes-playlist-export" / "config.json",
    ]


def find_config_file() -> Optional[Path]:
    """Find the first existing configuration file in default locations."""
    for config_path in get_default_config_paths():
        if config_path.exists():
            return config_path
    return None
