"""Catalog of audio and playlist objects found on the device."""

import logging
from pathlib import PurePosixPath
from typing import Iterable, List, Optional, Sequence

from ..models import CatalogEntry, EntryKind, ScanResult
from ..models.models import AUDIO_EXTENSIONS, PLAYLIST_EXTENSIONS
from .errors import DeviceSyncError
from .paths import normalize_logical_path
from .playlist import derive_display_name
from .transport.base import TransportGateway

DEFAULT_ROOTS = ("/Music",)


class CatalogScanner:
    """Walk device folders and classify what is found.

    A scan is a read-only snapshot. Entries are only valid for the operation
    that requested the scan.
    """

    def __init__(
        self,
        transport: TransportGateway,
        audio_extensions: Sequence[str] = AUDIO_EXTENSIONS,
        playlist_extensions: Sequence[str] = PLAYLIST_EXTENSIONS,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """Initialize scanner.

        Args:
            transport: Gateway (usually a DeviceSession) to walk
            audio_extensions: Extensions classified as audio
            playlist_extensions: Extensions classified as playlists
            logger: Logger to use instead of the module logger
        """
        self.transport = transport
        self.audio_extensions = tuple(ext.lower() for ext in audio_extensions)
        self.playlist_extensions = tuple(ext.lower() for ext in playlist_extensions)
        self.logger = logger or logging.getLogger(__name__)

    def scan(
        self, storage_id: int, root_paths: Iterable[str] = DEFAULT_ROOTS
    ) -> ScanResult:
        """Scan one storage below the given roots.

        Zero-byte audio objects are left out of ``audio``, unless nothing
        else was found; they are then returned and ``only_empty_audio`` is
        set.

        Args:
            storage_id: Storage to scan
            root_paths: Folder paths to walk

        Returns:
            Audio and playlist entries found
        """
        result = ScanResult()
        valid_audio: List[CatalogEntry] = []

        for root in root_paths:
            self.logger.debug("Scanning %s on storage %#x", root, storage_id)
            try:
                for item in self.transport.walk(storage_id, root, recursive=True):
                    if item.is_dir:
                        continue
                    kind = self._classify(item.path)
                    if kind is None:
                        continue

                    entry = CatalogEntry(
                        logical_path=normalize_logical_path(item.path),
                        handle=item.handle,
                        storage_id=storage_id,
                        parent_handle=item.parent_handle,
                        display_name=derive_display_name(item.path),
                        size_bytes=item.size,
                        kind=kind,
                    )
                    if kind == EntryKind.PLAYLIST:
                        result.playlists.append(entry)
                    elif item.size == 0:
                        result.empty_audio.append(entry)
                    else:
                        valid_audio.append(entry)
            except DeviceSyncError as e:
                self.logger.warning("Error scanning %s: %s", root, e)
                result.failed_roots.append(root)
                continue

        if valid_audio:
            result.audio = valid_audio
        elif result.empty_audio:
            self.logger.warning(
                "Only empty audio files found (%d); earlier uploads may have failed",
                len(result.empty_audio),
            )
            result.audio = list(result.empty_audio)
            result.only_empty_audio = True

        self.logger.info(
            "Scan of storage %#x: %d audio, %d playlists, %d empty",
            storage_id,
            len(result.audio),
            len(result.playlists),
            len(result.empty_audio),
        )
        return result

    def scan_audio(
        self, storage_id: int, root_paths: Iterable[str] = DEFAULT_ROOTS
    ) -> List[CatalogEntry]:
        """Scan and return audio entries only."""
        return self.scan(storage_id, root_paths).audio

    def _classify(self, path: str) -> Optional[EntryKind]:
        suffix = PurePosixPath(path).suffix.lower()
        if suffix in self.audio_extensions:
            return EntryKind.AUDIO
        if suffix in self.playlist_extensions:
            return EntryKind.PLAYLIST
        return None
