"""
Command-line interface modules.
"""

from .main import main
from .commands import ExportCommand, ListCommand

__all__ = [
    "main",
    "ExportCommand",
    "ListCommand",
]
