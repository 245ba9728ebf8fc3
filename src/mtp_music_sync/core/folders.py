"""Idempotent folder lookup and creation on the device."""

import logging
from typing import Iterable, Optional

from ..models import PARENT_ROOT, DeviceObject, FormatCode
from .errors import DeviceSyncError, InvalidInputError, ObjectNotFoundError
from .retry import with_retry
from .transport.session import DeviceSession

DEFAULT_MUSIC_FOLDER = "Music"


class FolderNavigator:
    """Find folders by name and create them when missing.

    Lookups are case-insensitive. New folders are always created with an
    upper-case name.
    """

    def __init__(
        self,
        session: DeviceSession,
        music_folder: str = DEFAULT_MUSIC_FOLDER,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """Initialize navigator.

        Args:
            session: Device session
            music_folder: Name of the music root folder
            logger: Logger to use instead of the module logger
        """
        self.session = session
        self.music_folder = music_folder
        self.logger = logger or logging.getLogger(__name__)

    def find(self, storage_id: int, parent_handle: int, name: str) -> Optional[int]:
        """Look up a child folder by name.

        Args:
            storage_id: Storage to look in
            parent_handle: Folder to search
            name: Folder name, compared case-insensitively

        Returns:
            Handle of the folder or None
        """
        wanted = name.lower()
        for child in self.session.list_child_objects(storage_id, parent_handle):
            if child.is_folder and child.filename.lower() == wanted:
                return child.handle
        return None

    def find_or_create(self, storage_id: int, parent_handle: int, name: str) -> int:
        """Return the handle of a folder, creating it when absent.

        When creation fails (for instance because the folder appeared in the
        meantime), the lookup is repeated once before the creation error is
        raised.

        Args:
            storage_id: Storage to work in
            parent_handle: Parent folder handle
            name: Folder name

        Returns:
            Folder handle

        Raises:
            InvalidInputError: If the name is empty
            DeviceSyncError: The creation error, if the folder could neither be
                created nor found
        """
        if not name or not name.strip():
            raise InvalidInputError("Folder name must not be empty")

        existing = self.find(storage_id, parent_handle, name)
        if existing is not None:
            self.logger.debug("Folder %s exists with handle %d", name, existing)
            return existing

        folder_name = name.strip().upper()

        def create() -> int:
            info = DeviceObject(
                parent_handle=parent_handle,
                storage_id=storage_id,
                filename=folder_name,
                format_code=FormatCode.FOLDER,
            )
            return self.session.set_object_info(storage_id, parent_handle, info)

        def lookup_again() -> int:
            handle = self.find(storage_id, parent_handle, name)
            if handle is None:
                raise ObjectNotFoundError(
                    "Folder missing after failed creation", name=folder_name
                )
            return handle

        result = with_retry(
            create,
            attempts=1,
            fallback=lookup_again,
            retry_on=(DeviceSyncError,),
            description=f"create folder {folder_name}",
            log=self.logger,
        )
        if not result.ok and isinstance(result.error, DeviceSyncError):
            raise result.error
        handle = result.unwrap("Could not create folder", name=folder_name)
        self.logger.info("Using folder %s (handle %d)", folder_name, handle)
        return handle

    def ensure_path(
        self, storage_id: int, parent_handle: int, names: Iterable[str]
    ) -> int:
        """Find or create a chain of nested folders.

        Returns:
            Handle of the innermost folder
        """
        handle = parent_handle
        for name in names:
            handle = self.find_or_create(storage_id, handle, name)
        return handle

    def ensure_music_folder(self, storage_id: int) -> int:
        """Find or create the music root folder of a storage."""
        return self.find_or_create(storage_id, PARENT_ROOT, self.music_folder)
