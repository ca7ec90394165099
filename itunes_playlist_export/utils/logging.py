"""
Logging utilities for iTunes Playlist Export.

Provides consistent logging configuration across all modules with:
- Colored console output
- File logging support
- Progress indicators
"""

import copy
import logging
import sys
from pathlib import Path
from typing import Optional
from datetime import datetime
import colorama
from colorama import Fore, Style


class ColoredFormatter(logging.Formatter):
    """Custom formatter with colored output for different log levels."""

    COLORS = {
        "DEBUG": Fore.CYAN,
        "INFO": Fore.GREEN,
        "WARNING": Fore.YELLOW,
        "ERROR": Fore.RED,
        "CRITICAL": Fore.RED + Style.BRIGHT,
    }

    def format(self, record: logging.LogRecord) -> str:
        # Records are shared between handlers, color a copy only
        record = copy.copy(record)
        level_color = self.COLORS.get(record.levelname, "")
        record.levelname = f"{level_color}{record.levelname}{Style.RESET_ALL}"

        return super().format(record)


class ProgressLogger:
    """Helper class for logging progress with consistent formatting."""

    def __init__(
        self, logger: logging.Logger, total: int, description: str = "Processing"
    ):
        self.logger = logger
        self.total = total
        self.description = description
        self.current = 0
        self.start_time = datetime.now()

    def update(self, increment: int = 1, message: Optional[str] = None) -> None:
        """Update progress and optionally log a message."""
        self.current += increment

        if message:
            percentage = (self.current / self.total) * 100 if self.total > 0 else 0
            elapsed = datetime.now() - self.start_time
            self.logger.info(
                f"[{percentage:5.1f}%] {self.description}: {message} ({elapsed})"
            )

    def finish(self, message: Optional[str] = None) -> None:
        """Log completion message."""
        elapsed = datetime.now() - self.start_time
        final_message = message or f"{self.description} completed"
        self.logger.info(f"✅ {final_message} ({elapsed})")


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    console: bool = True,
    format_string: Optional[str] = None,
    include_timestamp: bool = True,
) -> logging.Logger:
    """
    Set up logging configuration.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path for file logging
        console: Whether to enable console logging
        format_string: Custom format string
        include_timestamp: Whether to include timestamps in logs

    Returns:
        Configured logger instance
    """
    colorama.just_fix_windows_console()

    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    if format_string is None:
        if include_timestamp:
            format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        else:
            format_string = "%(name)s - %(levelname)s - %(message)s"

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(numeric_level)
        console_handler.setFormatter(ColoredFormatter(format_string))
        root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(numeric_level)

        # No colors in files
        file_handler.setFormatter(logging.Formatter(format_string))
        root_logger.addHandler(file_handler)

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name."""
    return logging.getLogger(name)


def log_success(logger: logging.Logger, message: str) -> None:
    """Log a success message with special formatting."""
    logger.info(f"✅ {message}")


def log_warning(logger: logging.Logger, message: str) -> None:
    """Log a warning message with special formatting."""
    logger.warning(f"⚠️  {message}")


def log_error(logger: logging.Logger, message: str) -> None:
    """Log an error message with special formatting."""
    logger.error(f"❌ {message}")


def log_exception(
    logger: logging.Logger, exception: Exception, context: str = ""
) -> None:
    """Log an exception with context information."""
    context_str = f" in {context}" if context else ""
    logger.error(
        f"Exception{context_str}: {type(exception).__name__}: {exception}",
        exc_info=True,
    )


def create_progress_logger(
    total: int, description: str = "Processing"
) -> ProgressLogger:
    """Create a progress logger instance."""
    logger = get_logger("progress")
    return ProgressLogger(logger, total, description)
