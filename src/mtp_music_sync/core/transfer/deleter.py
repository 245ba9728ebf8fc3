"""Delete objects and folder trees from the device."""

import logging
from typing import Optional

from ...models import PARENT_ROOT, DeletionReport, DeviceObject
from ..errors import (
    DeviceSyncError,
    OperationCancelledError,
    PartialFailureError,
    SafetyRejectedError,
)
from ..folders import DEFAULT_MUSIC_FOLDER
from ..paths import normalize_logical_path
from ..retry import RetryOutcome, with_retry
from ..transport.session import DeviceSession
from .confirm import ERASE_PHRASE, Confirmer


class Deleter:
    """Remove files and folders, retrying the flaky delete call."""

    def __init__(
        self,
        session: DeviceSession,
        music_folder: str = DEFAULT_MUSIC_FOLDER,
        delete_attempts: int = 3,
        delete_retry_delay: float = 0.5,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """Initialize deleter.

        Args:
            session: Device session
            music_folder: Name of the music root, protected like the storage root
            delete_attempts: Direct delete attempts before the fallback
            delete_retry_delay: Seconds between delete attempts
            logger: Logger to use instead of the module logger
        """
        self.session = session
        self.music_folder = music_folder
        self.delete_attempts = delete_attempts
        self.delete_retry_delay = delete_retry_delay
        self.logger = logger or logging.getLogger(__name__)

    def delete_object(self, storage_id: int, handle: int) -> RetryOutcome:
        """Delete one object.

        The direct delete is retried ``delete_attempts`` times. If it keeps
        failing, the object's size is reset to zero through its metadata and
        the delete is attempted once more.

        Args:
            storage_id: Storage holding the object
            handle: Object to delete

        Returns:
            SUCCESS, or DEGRADED when the zero-size fallback was needed

        Raises:
            RetryExhaustedError: If the object could not be deleted
        """
        result = with_retry(
            lambda: self.session.delete_object(handle),
            attempts=self.delete_attempts,
            delay=self.delete_retry_delay,
            fallback=lambda: self._delete_after_reset(storage_id, handle),
            description=f"delete object {handle}",
            log=self.logger,
        )
        result.unwrap("Could not delete object", handle=handle)
        return result.outcome

    def _delete_after_reset(self, storage_id: int, handle: int) -> None:
        info = self.session.get_object_info(handle)
        reset = DeviceObject(
            handle=handle,
            parent_handle=info.parent_handle,
            storage_id=info.storage_id or storage_id,
            filename=info.filename,
            format_code=info.format_code,
            size_bytes=0,
        )
        self.session.set_object_info(storage_id, info.parent_handle, reset)
        self.session.delete_object(handle)

    def is_protected(
        self, folder_path: str, folder_handle: Optional[int] = None
    ) -> bool:
        """Check whether a folder is the storage root or the music root."""
        if folder_handle == PARENT_ROOT:
            return True
        normalized = normalize_logical_path(folder_path)
        return normalized in ("/", "/" + self.music_folder.upper())

    def delete_folder(
        self,
        storage_id: int,
        folder_handle: int,
        folder_path: str,
        require_confirmation: bool = True,
        confirmer: Optional[Confirmer] = None,
    ) -> DeletionReport:
        """Delete a folder and everything below it.

        Sub-folders are removed first, then files, then the folder itself.
        The storage root object is never removed, only its content. Failures
        of individual items are counted and the walk continues.

        Deleting the storage root or the music root requires the user to
        type the erase phrase; an ordinary yes is not enough.

        Args:
            storage_id: Storage holding the folder
            folder_handle: Folder to delete, 0 for the storage root
            folder_path: Logical path of the folder
            require_confirmation: Ask before deleting
            confirmer: Source of confirmations

        Returns:
            Counts of deleted files and folders

        Raises:
            SafetyRejectedError: If a protected folder was not confirmed with
                the erase phrase
            OperationCancelledError: If the user declined
            PartialFailureError: If some items could not be deleted; carries
                the report
        """
        if self.is_protected(folder_path, folder_handle):
            message = (
                f"This deletes EVERYTHING in {folder_path}. "
                f"Type {ERASE_PHRASE!r} to continue"
            )
            confirmed = confirmer is not None and confirmer.confirm_phrase(
                message, ERASE_PHRASE
            )
            if not confirmed:
                self.logger.warning(
                    "Refused to delete protected folder %s", folder_path
                )
                raise SafetyRejectedError(
                    "Deleting this folder requires the erase phrase", path=folder_path
                )
        if require_confirmation:
            if confirmer is None or not confirmer.confirm(
                f"Delete {folder_path} and everything in it?"
            ):
                raise OperationCancelledError("Deletion cancelled", path=folder_path)

        self.logger.info("Deleting folder %s", folder_path)
        report = self._delete_tree(storage_id, folder_handle, folder_path)
        self.logger.info(
            "Deleted %d files and %d folders from %s (%d failed)",
            report.deleted_files,
            report.deleted_folders,
            folder_path,
            report.failed_items,
        )
        if report.failed_items:
            raise PartialFailureError(
                "Some items could not be deleted", report=report, path=folder_path
            )
        return report

    def _delete_tree(
        self, storage_id: int, folder_handle: int, folder_path: str
    ) -> DeletionReport:
        report = DeletionReport()
        children = self.session.list_child_objects(storage_id, folder_handle)
        folders = [child for child in children if child.is_folder]
        files = [child for child in children if not child.is_folder]

        for folder in folders:
            path = f"{folder_path.rstrip('/')}/{folder.filename}"
            try:
                report.merge(self._delete_tree(storage_id, folder.handle, path))
            except DeviceSyncError as e:
                self.logger.error("Failed to delete folder %s: %s", path, e)
                report.record_failure(f"{path}: {e}")

        for item in files:
            path = f"{folder_path.rstrip('/')}/{item.filename}"
            try:
                self.delete_object(storage_id, item.handle)
                report.deleted_files += 1
                self.logger.debug("Deleted %s", path)
            except DeviceSyncError as e:
                self.logger.error("Failed to delete %s: %s", path, e)
                report.record_failure(f"{path}: {e}")

        if folder_handle != PARENT_ROOT:
            try:
                self.delete_object(storage_id, folder_handle)
                report.deleted_folders += 1
            except DeviceSyncError as e:
                self.logger.error("Failed to delete folder %s: %s", folder_path, e)
                report.record_failure(f"{folder_path}: {e}")

        return report
