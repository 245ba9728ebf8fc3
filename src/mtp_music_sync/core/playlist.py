"""Extended M3U playlist encoding and decoding.

Devices differ in how they want playlist entries spelled, so paths are
rendered in one of four styles:

1. ``0:/MUSIC/ARTIST/ALBUM/TRACK.MP3`` (upper-case with drive prefix)
2. ``/MUSIC/ARTIST/ALBUM/TRACK.MP3``
3. ``MUSIC/ARTIST/ALBUM/TRACK.MP3``
4. ``0:/Music/Artist/Album/Track.mp3`` (case preserved)
"""

import logging
from enum import IntEnum
from pathlib import PurePosixPath
from typing import List, Union

from ..models import PlaylistDocument, PlaylistEntry
from .paths import (
    DRIVE_PREFIX,
    normalize_logical_path,
    sanitize_folder_name,
    split_components,
)

logger = logging.getLogger(__name__)

HEADER = "#EXTM3U"
EXTINF = "#EXTINF:"
UNKNOWN_ARTIST = "UNKNOWN ARTIST"
PLAYLIST_SUFFIX = ".M3U8"
BOM = "\ufeff"


class PathStyle(IntEnum):
    """How track paths are written into playlist files."""

    DRIVE_UPPER = 1
    UPPER = 2
    RELATIVE = 3
    DRIVE_PRESERVED = 4


def _coerce_style(style: Union[int, PathStyle]) -> PathStyle:
    try:
        return PathStyle(int(style))
    except ValueError:
        logger.debug("Unknown playlist path style %r, using style 1", style)
        return PathStyle.DRIVE_UPPER


def format_playlist_path(
    path: str, style: Union[int, PathStyle] = PathStyle.DRIVE_UPPER
) -> str:
    """Render a track path for a playlist file.

    Args:
        path: Track path, with or without ``file://`` or ``0:`` prefix
        style: Path style, unknown values fall back to style 1

    Returns:
        Path as it should appear in the playlist
    """
    style = _coerce_style(style)
    path = normalize_logical_path(path, upper=False)

    if style == PathStyle.UPPER:
        formatted = path.upper()
    elif style == PathStyle.RELATIVE:
        formatted = path.upper().lstrip("/")
    elif style == PathStyle.DRIVE_PRESERVED:
        formatted = f"{DRIVE_PREFIX}/{path.lstrip('/')}"
    else:
        formatted = f"{DRIVE_PREFIX}/{path.lstrip('/')}".upper()

    return formatted.replace("//", "/")


def derive_display_name(path: str) -> str:
    """Build an ``Artist - Title`` display name from a track path.

    The artist comes from a ``Music/<Artist>/<Album>/`` folder layout when
    present, otherwise from a ``Artist - Title`` file name.

    Args:
        path: Track path

    Returns:
        Display name for the ``#EXTINF`` line
    """
    parts = split_components(path)
    if not parts:
        return f"{UNKNOWN_ARTIST} - "

    filename = parts[-1]
    title = PurePosixPath(filename).stem if "." in filename else filename
    title = title.replace("_", " ").strip()

    # Music/<Artist>/<Album>/<file>
    for index in range(len(parts) - 3):
        if parts[index].lower() == "music":
            artist = parts[index + 1].replace("_", " ").strip()
            return f"{artist} - {title}"

    if " - " in title:
        artist, _, rest = title.partition(" - ")
        return f"{artist.strip()} - {rest.strip()}"

    return f"{UNKNOWN_ARTIST} - {title}"


def encode(
    document: PlaylistDocument, style: Union[int, PathStyle] = PathStyle.DRIVE_UPPER
) -> str:
    """Render a playlist document as extended M3U text.

    Args:
        document: Playlist to render
        style: Path style for the entry lines

    Returns:
        Playlist file content
    """
    lines = [HEADER]
    for entry in document.entries:
        display = entry.display_name or derive_display_name(entry.path)
        lines.append(f"{EXTINF}-1,{display}")
        lines.append(format_playlist_path(entry.path, style))
    return "\n".join(lines) + "\n"


def _lines(text: str) -> List[str]:
    if text.startswith(BOM):
        text = text[1:]
    return text.splitlines()


def decode(text: str) -> List[str]:
    """Extract the track paths of a playlist file.

    Blank lines and ``#`` directives are skipped; the remaining lines are
    returned verbatim after trimming.
    """
    paths = []
    for line in _lines(text):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        paths.append(line)
    return paths


def parse_document(name: str, text: str) -> PlaylistDocument:
    """Parse playlist text into a document, keeping ``#EXTINF`` titles.

    Args:
        name: Playlist name
        text: Playlist file content

    Returns:
        Parsed playlist document
    """
    entries = []
    pending_display = ""
    for line in _lines(text):
        line = line.strip()
        if not line:
            continue
        if line.startswith(EXTINF):
            _, _, pending_display = line.partition(",")
            pending_display = pending_display.strip()
            continue
        if line.startswith("#"):
            continue
        entries.append(
            PlaylistEntry(
                display_name=pending_display or derive_display_name(line), path=line
            )
        )
        pending_display = ""
    return PlaylistDocument(name=name, entries=entries)


def playlist_filename(name: str) -> str:
    """Build the device file name of a playlist.

    Args:
        name: Playlist name, with or without extension

    Returns:
        Sanitized upper-case file name ending in ``.M3U8``
    """
    stem = name.strip()
    for suffix in (".m3u8", ".m3u"):
        if stem.lower().endswith(suffix):
            stem = stem[: -len(suffix)]
            break
    return sanitize_folder_name(stem).upper() + PLAYLIST_SUFFIX


def text_bytes(text: str) -> bytes:
    """Encode playlist text for the device."""
    return text.encode("utf-8")


def text_from_bytes(data: bytes) -> str:
    """Decode playlist bytes read from the device, dropping a byte-order mark."""
    return data.decode("utf-8-sig", errors="replace")
