"""Application services."""

from .library_service import LibraryService
from .tag_reader import UNKNOWN_ALBUM, UNKNOWN_ARTIST, TagReader, TrackTags

__all__ = [
    "LibraryService",
    "TagReader",
    "TrackTags",
    "UNKNOWN_ALBUM",
    "UNKNOWN_ARTIST",
]
