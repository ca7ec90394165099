"""
Track location handling.

iTunes stores track locations as ``file://`` URIs with percent-encoded
characters (``file://localhost/Users/me/Music/My%20Song.mp3`` on macOS,
``file://localhost/C:/Music/My%20Song.mp3`` on Windows). Locations are turned
into plain paths with ``/`` separators before any prefix is rewritten.
"""

import re
from typing import Optional
from urllib.parse import unquote

FILE_SCHEME = "file://"

_LOCALHOST = "localhost"
_DRIVE_PATH = re.compile(r"^/[A-Za-z]:(/|$)")


def location_to_path(location: str) -> str:
    """
    Convert a track location to a path using ``/`` as separator.

    Plain paths are only separator-normalized; URIs are also stripped of their
    scheme and host and percent-decoded.
    """
    path = location.strip()

    if path[: len(FILE_SCHEME)].lower() == FILE_SCHEME:
        path = path[len(FILE_SCHEME):]
        if path[: len(_LOCALHOST)].lower() == _LOCALHOST:
            path = path[len(_LOCALHOST):]
        path = unquote(path)

    path = path.replace("\\", "/")

    # /C:/Music -> C:/Music
    if _DRIVE_PATH.match(path):
        path = path[1:]

    return path


def _strip_trailing_separator(path: str) -> str:
    stripped = path.rstrip("/")
    # Keep a lone root or drive root intact
    if not stripped or re.fullmatch(r"[A-Za-z]:", stripped):
        return path[: len(stripped) + 1] if path else path
    return stripped


class PathNormalizer:
    """
    Rewrites track locations from one path prefix to another.

    Without both prefixes configured, locations are only normalized. A prefix
    matches whole path components only: ``/music`` matches ``/music/a.mp3``
    but not ``/musical/a.mp3``.
    """

    def __init__(self, orig_prefix: Optional[str] = None, new_prefix: Optional[str] = None):
        self.orig_prefix = (
            _strip_trailing_separator(location_to_path(orig_prefix)) if orig_prefix else None
        )
        self.new_prefix = (
            _strip_trailing_separator(new_prefix.replace("\\", "/")) if new_prefix else None
        )

    @property
    def is_active(self) -> bool:
        return bool(self.orig_prefix and self.new_prefix)

    def matches(self, path: str) -> bool:
        """
        Check whether an already normalized path starts with the original prefix.

        Only whole path components count. A prefix that ends inside a component
        (``/music`` against ``/musical/a.mp3``) does not match, so such paths are
        left as they are.
        """
        if not self.orig_prefix:
            return False
        if not path.startswith(self.orig_prefix):
            return False
        if self.orig_prefix.endswith("/"):
            return True
        remainder = path[len(self.orig_prefix):]
        return remainder == "" or remainder.startswith("/")

    def normalize(self, location: str) -> str:
        """Normalize a location and rewrite its prefix if it matches."""
        path = location_to_path(location)

        if not self.is_active or not self.matches(path):
            return path

        remainder = path[len(self.orig_prefix):]
        # Only root prefixes ("/", "C:/") keep their trailing separator
        if self.new_prefix.endswith("/") and remainder.startswith("/"):
            remainder = remainder[1:]
        elif remainder and not remainder.startswith("/") and not self.new_prefix.endswith("/"):
            remainder = "/" + remainder
        return self.new_prefix + remainder

    def __repr__(self) -> str:
        return f"PathNormalizer({self.orig_prefix!r} -> {self.new_prefix!r})"


def to_native(path: str, separator: str) -> str:
    """Render a ``/``-separated path with the given separator."""
    if separator == "/":
        return path
    return path.replace("/", separator)
