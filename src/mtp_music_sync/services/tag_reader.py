"""Read artist and album tags from local audio files."""

import logging
from pathlib import Path
from typing import Any, Optional

from mutagen import File as MutagenFile
from mutagen import MutagenError
from mutagen.mp3 import HeaderNotFoundError
from pydantic import BaseModel

logger = logging.getLogger(__name__)

UNKNOWN_ARTIST = "UNKNOWN_ARTIST"
UNKNOWN_ALBUM = "UNKNOWN_ALBUM"


class TrackTags(BaseModel):
    """Tags that decide where a track is stored on the device."""

    artist: str = UNKNOWN_ARTIST
    album: str = UNKNOWN_ALBUM
    title: Optional[str] = None


class TagReader:
    """Extract ID3 metadata with mutagen."""

    def read(self, file_path: Path) -> TrackTags:
        """Read artist, album and title from an audio file.

        Missing or unreadable tags fall back to ``UNKNOWN_ARTIST`` and
        ``UNKNOWN_ALBUM``.

        Args:
            file_path: Audio file to inspect

        Returns:
            TrackTags for the file
        """
        try:
            audio_file = MutagenFile(file_path, easy=True)
        except (HeaderNotFoundError, MutagenError, OSError) as e:
            logger.warning("Cannot read tags for %s: %s", file_path, e)
            return TrackTags()

        if audio_file is None or audio_file.tags is None:
            logger.debug("No tags in %s", file_path)
            return TrackTags()

        return TrackTags(
            artist=self._first(audio_file.tags, "artist") or UNKNOWN_ARTIST,
            album=self._first(audio_file.tags, "album") or UNKNOWN_ALBUM,
            title=self._first(audio_file.tags, "title"),
        )

    @staticmethod
    def _first(tags: Any, key: str) -> Optional[str]:
        values = tags.get(key) if hasattr(tags, "get") else None
        if not values:
            return None
        value = values[0] if isinstance(values, list) else values
        value = str(value).strip()
        return value or None
