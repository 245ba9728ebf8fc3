"""Handle-based transport gateway.

Everything above this boundary speaks in logical paths; everything below it
only knows numeric object handles, the way MTP devices expose their storage.
"""

from abc import ABC, abstractmethod
from typing import Iterator, List

from ...models import DeviceObject, Storage, WalkEntry


class TransportGateway(ABC):
    """Primitive object store operations offered by a device.

    Implementations raise :class:`~mtp_music_sync.core.errors.TransientError`
    for failures worth retrying and
    :class:`~mtp_music_sync.core.errors.ObjectNotFoundError` for unknown
    handles or paths.
    """

    @abstractmethod
    def open(self) -> None:
        """Open the device session."""

    @abstractmethod
    def close(self) -> None:
        """Close the device session."""

    @abstractmethod
    def list_storages(self) -> List[Storage]:
        """List the storages exposed by the device."""

    @abstractmethod
    def list_children(self, storage_id: int, parent_handle: int) -> List[int]:
        """List handles of the direct children of a folder.

        Args:
            storage_id: Storage to look in
            parent_handle: Folder handle, 0 for the storage root

        Returns:
            Child object handles
        """

    @abstractmethod
    def get_object_info(self, handle: int) -> DeviceObject:
        """Read the metadata of an object."""

    @abstractmethod
    def set_object_info(
        self, storage_id: int, parent_handle: int, obj: DeviceObject
    ) -> int:
        """Register object metadata.

        A new object is created when ``obj.handle`` is unknown; otherwise the
        metadata of the existing object is replaced.

        Returns:
            Handle of the registered object
        """

    @abstractmethod
    def send_object_bytes(self, handle: int, data: bytes, size: int) -> None:
        """Send the content of a registered object."""

    @abstractmethod
    def read_object_bytes(self, handle: int) -> bytes:
        """Read the content of an object."""

    @abstractmethod
    def delete_object(self, handle: int) -> None:
        """Delete an object."""

    @abstractmethod
    def walk(
        self, storage_id: int, root_path: str, recursive: bool = True
    ) -> Iterator[WalkEntry]:
        """Lazily list every object below a folder path.

        Args:
            storage_id: Storage to walk
            root_path: Folder path to start from, e.g. ``/Music``
            recursive: Descend into sub-folders

        Yields:
            One WalkEntry per object
        """

    def __enter__(self) -> "TransportGateway":
        """Open the session when used as a context manager."""
        self.open()
        return self

    def __exit__(self, *exc_info: object) -> None:
        """Close the session on context exit."""
        self.close()
