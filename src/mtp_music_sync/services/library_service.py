"""Music library operations on a connected device.

This is the layer the CLI talks to. It wires the catalog scanner, path
resolver, folder navigator and transfer engine over one device session and
asks for confirmation before anything is deleted.
"""

import logging
from pathlib import Path
from typing import List, Optional, Tuple

from thefuzz import process

from ..config import Config
from ..core.catalog import CatalogScanner
from ..core.errors import (
    DeviceSyncError,
    InvalidInputError,
    ObjectNotFoundError,
    OperationCancelledError,
    PartialFailureError,
)
from ..core.folders import FolderNavigator
from ..core.paths import (
    normalize_logical_path,
    sanitize_file_name,
    sanitize_folder_name,
)
from ..core.playlist import (
    derive_display_name,
    encode,
    parse_document,
    playlist_filename,
    text_bytes,
    text_from_bytes,
)
from ..core.resolver import PathResolver
from ..core.retry import with_retry
from ..core.transfer import Confirmer, Deleter, Uploader
from ..core.transport.session import DeviceSession
from ..models import (
    PARENT_ROOT,
    BatchUploadResult,
    CatalogEntry,
    DeletionReport,
    DeviceObject,
    EntryKind,
    FormatCode,
    PlaylistDocument,
    PlaylistEntry,
    Storage,
    TransferJob,
    UploadedTrack,
)
from .tag_reader import TagReader


class LibraryService:
    """High level music and playlist management."""

    def __init__(
        self,
        session: DeviceSession,
        config: Config,
        confirmer: Optional[Confirmer] = None,
        tag_reader: Optional[TagReader] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """Initialize library service.

        Args:
            session: Connected device session
            config: Application configuration
            confirmer: Source of confirmations for destructive operations
            tag_reader: Tag reader for uploads
            logger: Logger passed to every component
        """
        self.session = session
        self.config = config
        self.confirmer = confirmer
        self.tag_reader = tag_reader or TagReader()
        self.logger = logger or logging.getLogger(__name__)

        self.scanner = CatalogScanner(
            session,
            audio_extensions=config.audio_extensions,
            playlist_extensions=config.playlist_extensions,
            logger=logger,
        )
        self.resolver = PathResolver(
            session,
            scanner=self.scanner,
            catalog_roots=config.catalog_roots,
            logger=logger,
        )
        self.navigator = FolderNavigator(
            session, music_folder=config.music_folder, logger=logger
        )
        self.uploader = Uploader(
            session,
            max_upload_bytes=config.max_upload_bytes,
            partial_transfer_bytes=config.partial_transfer_bytes,
            metadata_attempts=config.metadata_attempts,
            metadata_retry_delay=config.metadata_retry_delay,
            send_retry_delay=config.send_retry_delay,
            logger=logger,
        )
        self.deleter = Deleter(
            session,
            music_folder=config.music_folder,
            delete_attempts=config.delete_attempts,
            delete_retry_delay=config.delete_retry_delay,
            logger=logger,
        )

    @property
    def music_root(self) -> str:
        """Logical path of the music root."""
        return "/" + self.config.music_folder.upper()

    # Storage

    def storages(self) -> List[Storage]:
        """List device storages within the configured timeout."""
        return self.session.fetch_storages(self.config.connect_timeout)

    def select_storage(self, index: Optional[int] = None) -> Storage:
        """Pick the storage to work on.

        A device with a single storage needs no choice.

        Args:
            index: Zero-based storage index

        Returns:
            Selected storage

        Raises:
            InvalidInputError: If several storages exist and the index is
                missing or out of range
        """
        storages = self.storages()
        if len(storages) == 1 and index in (None, 0):
            return storages[0]
        if index is None:
            raise InvalidInputError(
                "Device has several storages; choose one", count=len(storages)
            )
        if not 0 <= index < len(storages):
            raise InvalidInputError("Invalid storage index", index=index)
        return storages[index]

    def _storage_ids(self, storage_id: Optional[int]) -> List[int]:
        if storage_id is not None:
            return [storage_id]
        return [storage.storage_id for storage in self.storages()]

    # Listing

    def list_songs(self, storage_id: Optional[int] = None) -> List[CatalogEntry]:
        """List audio files below the catalog roots."""
        songs: List[CatalogEntry] = []
        for sid in self._storage_ids(storage_id):
            try:
                songs.extend(self.scanner.scan(sid, self.config.catalog_roots).audio)
            except DeviceSyncError as e:
                self.logger.error("Error scanning storage %#x: %s", sid, e)
        return songs

    def list_playlists(self, storage_id: Optional[int] = None) -> List[CatalogEntry]:
        """List playlist files below the catalog roots."""
        playlists: List[CatalogEntry] = []
        for sid in self._storage_ids(storage_id):
            try:
                playlists.extend(
                    self.scanner.scan(sid, self.config.catalog_roots).playlists
                )
            except DeviceSyncError as e:
                self.logger.error("Error scanning storage %#x: %s", sid, e)
        return playlists

    def read_playlist(self, entry: CatalogEntry) -> PlaylistDocument:
        """Read and parse a playlist stored on the device."""
        data = with_retry(
            lambda: self.session.read_object_bytes(entry.handle),
            attempts=self.config.metadata_attempts,
            delay=self.config.metadata_retry_delay,
            description=f"read playlist {entry.filename}",
            log=self.logger,
        ).unwrap("Could not read playlist", path=entry.logical_path)
        text = text_from_bytes(data)
        return parse_document(entry.name, text)

    def playlists_with_songs(
        self, storage_id: Optional[int] = None
    ) -> List[Tuple[CatalogEntry, List[str]]]:
        """List playlists together with the track paths they reference.

        Playlists that cannot be read are returned with an empty track list.
        """
        results = []
        for playlist in self.list_playlists(storage_id):
            try:
                paths = self.read_playlist(playlist).paths
            except DeviceSyncError as e:
                self.logger.error("Error reading playlist %s: %s", playlist.filename, e)
                paths = []
            results.append((playlist, paths))
        return results

    def find_playlist(
        self, name: str, storage_id: Optional[int] = None
    ) -> CatalogEntry:
        """Find a playlist by name.

        Exact (case-insensitive) matches on the file name, with or without
        extension, win. Otherwise the closest fuzzy match above the
        configured threshold is offered for confirmation.

        Raises:
            ObjectNotFoundError: If no playlist matches
        """
        playlists = self.list_playlists(storage_id)
        wanted = name.strip().lower()
        for playlist in playlists:
            if wanted in (playlist.filename.lower(), playlist.name.lower()):
                return playlist

        if playlists:
            names = [playlist.name for playlist in playlists]
            best = process.extractOne(name, names)
            if best and best[1] >= self.config.fuzzy_match_threshold:
                match = playlists[names.index(best[0])]
                self.logger.debug(
                    "Fuzzy playlist match for %s: %s (%d)", name, best[0], best[1]
                )
                if self.confirmer is not None and self.confirmer.confirm(
                    f"Playlist {name!r} not found. Did you mean {match.filename!r}?"
                ):
                    return match

        raise ObjectNotFoundError("Playlist not found", name=name)

    # Upload

    def upload_file(
        self,
        storage_id: int,
        source_file: Path,
        track_number: Optional[int] = None,
        music_handle: Optional[int] = None,
    ) -> UploadedTrack:
        """Upload one audio file into ``MUSIC/<ARTIST>/<ALBUM>/``.

        Artist and album come from the file's tags.

        Args:
            storage_id: Target storage
            source_file: Local audio file
            track_number: Prefix the device file name with this number
            music_handle: Handle of the music root, looked up if omitted

        Returns:
            The uploaded track

        Raises:
            InvalidInputError: If the file does not exist
            TooLargeError: If the file exceeds the upload limit
        """
        source_file = Path(source_file)
        if not source_file.is_file():
            raise InvalidInputError("File not found", path=str(source_file))
        size = source_file.stat().st_size
        self.uploader.check_size(size, source_file.name)

        tags = self.tag_reader.read(source_file)
        artist = sanitize_folder_name(tags.artist).upper()
        album = sanitize_folder_name(tags.album).upper()
        filename = sanitize_file_name(source_file.name).upper()
        if track_number is not None:
            filename = f"{track_number:02d} {filename}"

        logical_path = f"{self.music_root}/{artist}/{album}/{filename}"
        self.logger.info("Uploading %s to %s", source_file.name, logical_path)

        if music_handle is None:
            music_handle = self.navigator.ensure_music_folder(storage_id)
        album_handle = self.navigator.ensure_path(
            storage_id, music_handle, [artist, album]
        )

        result = self.uploader.upload(
            storage_id,
            TransferJob(
                source_file=source_file,
                target_parent_handle=album_handle,
                target_filename=filename,
                expected_size=size,
                format_code=FormatCode.AUDIO,
            ),
        )
        return UploadedTrack(
            logical_path=logical_path,
            handle=result.handle,
            display_name=derive_display_name(logical_path).upper(),
            source_file=source_file,
            partial=result.is_partial,
        )

    def upload_directory(
        self,
        storage_id: int,
        directory: Path,
        create_playlist: bool = True,
        playlist_name: Optional[str] = None,
    ) -> BatchUploadResult:
        """Upload every audio file of a directory and build a playlist.

        Files are numbered in sorted order. A failed file is recorded and the
        batch continues.

        Raises:
            InvalidInputError: If the directory holds no audio files
            OperationCancelledError: If the user declined
        """
        directory = Path(directory)
        if not directory.is_dir():
            raise InvalidInputError("Directory not found", path=str(directory))

        files = sorted(
            path
            for path in directory.rglob("*")
            if path.is_file() and path.suffix.lower() in self.config.audio_extensions
        )
        if not files:
            raise InvalidInputError("No audio files found", path=str(directory))

        self._confirm(f"Upload {len(files)} files from {directory.name}?")

        result = BatchUploadResult()
        music_handle = self.navigator.ensure_music_folder(storage_id)
        for number, path in enumerate(files, start=1):
            try:
                track = self.upload_file(
                    storage_id, path, track_number=number, music_handle=music_handle
                )
            except DeviceSyncError as e:
                self.logger.error("Failed to upload %s: %s", path.name, e)
                result.errors.append(f"{path.name}: {e}")
                continue
            result.uploaded.append(track)

        self.logger.info(
            "Uploaded %d of %d files from %s",
            result.success_count,
            len(files),
            directory,
        )

        if create_playlist and result.uploaded:
            try:
                result.playlist = self.create_playlist(
                    storage_id,
                    playlist_name or directory.name,
                    [track.logical_path for track in result.uploaded],
                )
            except DeviceSyncError as e:
                self.logger.error("Failed to create playlist: %s", e)
                result.errors.append(f"playlist: {e}")
        return result

    # Playlists

    def create_playlist(
        self,
        storage_id: int,
        name: str,
        track_paths: List[str],
        path_style: Optional[int] = None,
    ) -> CatalogEntry:
        """Write a playlist into the music root.

        Args:
            storage_id: Target storage
            name: Playlist name
            track_paths: Logical paths of the tracks, in order
            path_style: Playlist path style, configured style if omitted

        Returns:
            Catalog entry of the new playlist
        """
        if not name.strip():
            raise InvalidInputError("Playlist name must not be empty")
        if not track_paths:
            raise InvalidInputError("Playlist needs at least one track", name=name)

        document = PlaylistDocument(
            name=name,
            entries=[
                PlaylistEntry(
                    display_name=derive_display_name(path).upper(),
                    path=normalize_logical_path(path, upper=False),
                )
                for path in track_paths
            ],
        )
        style = path_style
        if style is None:
            style = self.config.playlist_path_style
        text = encode(document, style)
        filename = playlist_filename(name)

        music_handle = self.navigator.ensure_music_folder(storage_id)
        result = self.uploader.upload_bytes(
            storage_id, music_handle, filename, text_bytes(text), FormatCode.PLAYLIST
        )
        if not self.verify_playlist(storage_id, music_handle, filename):
            self.logger.warning("Playlist %s could not be verified on device", filename)

        self.logger.info(
            "Created playlist %s with %d tracks", filename, len(document.entries)
        )
        return CatalogEntry(
            logical_path=f"{self.music_root}/{filename}",
            handle=result.handle,
            storage_id=storage_id,
            parent_handle=music_handle,
            display_name=filename,
            size_bytes=result.bytes_sent,
            kind=EntryKind.PLAYLIST,
        )

    def verify_playlist(
        self, storage_id: int, parent_handle: int, filename: str
    ) -> bool:
        """Check that a playlist file is visible on the device.

        The parent folder is checked first, then a full playlist scan.
        """
        wanted = filename.lower()
        try:
            for child in self.session.list_child_objects(storage_id, parent_handle):
                if child.filename.lower() == wanted:
                    return True
        except DeviceSyncError as e:
            self.logger.warning("Could not list playlist folder: %s", e)

        for playlist in self.list_playlists(storage_id):
            if playlist.filename.lower() == wanted:
                return True
        return False

    # Delete

    def delete_playlist(self, entry: CatalogEntry) -> None:
        """Delete a playlist file, keeping its songs."""
        self._confirm(f"Delete playlist {entry.filename}?")
        self.deleter.delete_object(entry.storage_id, entry.handle)
        self.logger.info("Deleted playlist %s", entry.filename)

    def delete_song(self, entry: CatalogEntry) -> None:
        """Delete one song after a double confirmation."""
        self._confirm(f"Delete {entry.logical_path}?")
        self._confirm("This cannot be undone. Are you absolutely sure?")
        self.deleter.delete_object(entry.storage_id, entry.handle)
        self.logger.info("Deleted %s", entry.logical_path)

    def delete_playlist_and_songs(self, entry: CatalogEntry) -> DeletionReport:
        """Delete a playlist and every song it references.

        Songs that cannot be resolved or deleted are counted as failures and
        the playlist itself is still removed.

        Raises:
            OperationCancelledError: If the user declined
            PartialFailureError: If anything could not be deleted
        """
        document = self.read_playlist(entry)
        self._confirm(
            f"Delete playlist {entry.filename} and its {len(document.entries)} songs?"
        )

        report = DeletionReport()
        catalog = self.scanner.scan(entry.storage_id, self.config.catalog_roots).audio
        for path in document.paths:
            try:
                handle = self.resolver.resolve(entry.storage_id, path, catalog)
                self.deleter.delete_object(entry.storage_id, handle)
            except DeviceSyncError as e:
                self.logger.error("Failed to delete song %s: %s", path, e)
                report.record_failure(f"{path}: {e}")
                continue
            report.deleted_files += 1
            catalog = [item for item in catalog if item.handle != handle]

        try:
            self.deleter.delete_object(entry.storage_id, entry.handle)
            report.deleted_files += 1
        except DeviceSyncError as e:
            self.logger.error("Failed to delete playlist %s: %s", entry.filename, e)
            report.record_failure(f"{entry.logical_path}: {e}")

        if report.failed_items:
            raise PartialFailureError(
                "Playlist deletion incomplete", report=report, path=entry.logical_path
            )
        return report

    def music_subfolders(self, storage_id: int) -> List[DeviceObject]:
        """List the folders directly below the music root."""
        music_handle = self.navigator.find(
            storage_id, PARENT_ROOT, self.config.music_folder
        )
        if music_handle is None:
            return []
        return [
            child
            for child in self.session.list_child_objects(storage_id, music_handle)
            if child.is_folder
        ]

    def delete_folder(self, storage_id: int, path: str) -> DeletionReport:
        """Delete a folder subtree.

        The storage root and the music root require the erase phrase.

        Raises:
            ObjectNotFoundError: If the folder does not exist
            SafetyRejectedError: If a protected folder was not confirmed
            PartialFailureError: If some items could not be deleted
        """
        normalized = normalize_logical_path(path, upper=False)
        if normalized == "/":
            handle = PARENT_ROOT
        else:
            handle = self.resolver.resolve_folder(storage_id, normalized)
        return self.deleter.delete_folder(
            storage_id,
            handle,
            normalized,
            require_confirmation=True,
            confirmer=self.confirmer,
        )

    def _confirm(self, message: str) -> None:
        if self.confirmer is None or not self.confirmer.confirm(message):
            raise OperationCancelledError("Operation cancelled")
