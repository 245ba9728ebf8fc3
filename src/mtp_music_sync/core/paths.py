"""Logical path handling and device-safe name sanitizing.

Logical paths are slash separated strings such as ``/MUSIC/ARTIST/ALBUM/01
TRACK.MP3``. Devices and playlists spell the same location in several ways
(``0:/Music/...``, ``music/...``, ``file:///...``), so everything that
compares paths goes through :func:`normalize_logical_path` first.
"""

import re
from pathlib import PurePosixPath
from typing import List

DRIVE_PREFIX = "0:"

_URI_PREFIXES = ("file:///", "file://", "file:")
_TRACK_PREFIX = re.compile(r"^\d+[ _\-.]+(?=\S)")
_FOLDER_CHARS = re.compile(r"[^A-Za-z0-9!_\-&()+.' ]")
_REPEATED_UNDERSCORES = re.compile(r"_{2,}")
_REPEATED_SLASHES = re.compile(r"/{2,}")

MAX_NAME_LENGTH = 64


def strip_device_prefix(path: str) -> str:
    """Remove URI and drive prefixes from a path.

    Args:
        path: Raw path as found in a playlist or typed by a user

    Returns:
        Path without ``file://`` or ``0:`` prefixes
    """
    path = path.strip()
    for prefix in _URI_PREFIXES:
        if path.lower().startswith(prefix):
            path = path[len(prefix) :]
            break
    if path.startswith(DRIVE_PREFIX):
        path = path[len(DRIVE_PREFIX) :]
    return path


def normalize_logical_path(path: str, upper: bool = True) -> str:
    """Normalize a raw path into a logical path.

    The result starts with ``/``, uses ``/`` separators only and contains no
    doubled separators or trailing slash.

    Args:
        path: Raw path
        upper: Upper-case the result

    Returns:
        Normalized logical path
    """
    path = strip_device_prefix(path).replace("\\", "/")
    path = "/" + path.lstrip("/")
    path = _REPEATED_SLASHES.sub("/", path)
    if len(path) > 1:
        path = path.rstrip("/")
    return path.upper() if upper else path


def split_components(path: str) -> List[str]:
    """Split a path into its non-empty components."""
    return [part for part in path.replace("\\", "/").split("/") if part]


def path_variations(path: str) -> List[str]:
    """Generate the spellings under which a device may know a path.

    Order: the path as given, with and without the leading slash, with the
    ``0:`` drive prefix, then the upper- and lower-case form of each. The
    list contains no duplicates.

    Args:
        path: Path to expand

    Returns:
        Ordered list of path variations
    """
    raw = path.strip().replace("\\", "/")
    without_drive = raw[len(DRIVE_PREFIX) :] if raw.startswith(DRIVE_PREFIX) else raw
    bare = without_drive.lstrip("/")

    base = [
        raw,
        "/" + bare,
        bare,
        DRIVE_PREFIX + "/" + bare,
        DRIVE_PREFIX + bare,
    ]
    candidates = base + [p.upper() for p in base] + [p.lower() for p in base]

    seen = set()
    variations = []
    for candidate in candidates:
        if candidate and candidate not in seen:
            seen.add(candidate)
            variations.append(candidate)
    return variations


def strip_numeric_prefix(name: str) -> str:
    """Remove a leading track number such as ``01 ``, ``01_`` or ``01 - ``.

    Names that consist of a number only are returned unchanged.
    """
    return _TRACK_PREFIX.sub("", name, count=1)


def base_name(path: str) -> str:
    """Get the comparable base name of a path.

    The extension and any track number are removed and the result is
    upper-cased.
    """
    filename = split_components(path)[-1] if split_components(path) else ""
    stem = PurePosixPath(filename).stem if "." in filename else filename
    return strip_numeric_prefix(stem).strip().upper()


def parent_segment(path: str) -> str:
    """Get the name of the folder that contains ``path`` (lower-cased)."""
    parts = split_components(path)
    return parts[-2].lower() if len(parts) >= 2 else ""


def sanitize_folder_name(name: str) -> str:
    """Make a name safe for use as a device folder.

    Spaces and unsupported characters become underscores, runs of
    underscores collapse and the result is at most 64 characters.

    Args:
        name: Folder name, typically an artist or album tag

    Returns:
        Sanitized folder name, ``unnamed`` if nothing usable is left
    """
    cleaned = _FOLDER_CHARS.sub("_", name.strip()).replace(" ", "_")
    cleaned = _REPEATED_UNDERSCORES.sub("_", cleaned).strip("_")
    cleaned = cleaned[:MAX_NAME_LENGTH].rstrip("_")
    return cleaned or "unnamed"


def sanitize_file_name(name: str) -> str:
    """Make a file name safe for the device while keeping its extension.

    Args:
        name: File name

    Returns:
        Sanitized file name, ``unnamed.mp3`` if nothing usable is left
    """
    pure = PurePosixPath(name.strip())
    ext = pure.suffix
    stem = name.strip()[: -len(ext)] if ext else name.strip()

    cleaned = _FOLDER_CHARS.sub("_", stem).replace(" ", "_")
    cleaned = _REPEATED_UNDERSCORES.sub("_", cleaned).strip("_")
    cleaned = cleaned[: MAX_NAME_LENGTH - len(ext)].rstrip("_")
    if not cleaned:
        return "unnamed.mp3"
    return cleaned + ext
