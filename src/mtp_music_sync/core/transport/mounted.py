"""Transport gateway for devices mounted as a directory tree.

MTP devices mounted with ``jmtpfs``, ``gvfs-mtp`` or similar tools show each
storage as a top-level directory of the mount point. This gateway emulates
the handle-based object store on top of such a mount so the sync engine
works the same way it would over a native MTP binding.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from ...models import PARENT_ROOT, DeviceObject, FormatCode, Storage, WalkEntry
from ...models import format_code_for
from ..errors import InvalidInputError, ObjectNotFoundError, TransientError
from .base import TransportGateway

logger = logging.getLogger(__name__)


class MountedDeviceTransport(TransportGateway):
    """Object store view of a mounted device directory."""

    STORAGE_ID_BASE = 0x00010001

    def __init__(self, mount_point: Path) -> None:
        """Initialize transport.

        Args:
            mount_point: Directory the device is mounted on
        """
        self.mount_point = Path(mount_point)
        self._opened = False
        self._storages: Dict[int, Path] = {}
        self._paths: Dict[int, Path] = {}
        self._handles: Dict[Path, int] = {}
        self._handle_storage: Dict[int, int] = {}
        self._next_handle = 1

    # Session

    def open(self) -> None:
        """Enumerate storages below the mount point."""
        if not self.mount_point.is_dir():
            raise TransientError(
                "Device is not mounted", mount_point=str(self.mount_point)
            )
        try:
            storage_dirs = sorted(
                (p for p in self.mount_point.iterdir() if p.is_dir()),
                key=lambda p: p.name.lower(),
            )
        except OSError as e:
            raise TransientError(
                f"Cannot open device: {e}", mount_point=str(self.mount_point)
            ) from e

        self._storages = {
            self.STORAGE_ID_BASE + index: path
            for index, path in enumerate(storage_dirs)
            if not path.name.startswith(".")
        }
        self._paths.clear()
        self._handles.clear()
        self._handle_storage.clear()
        self._next_handle = 1
        self._opened = True
        logger.debug(
            "Opened mounted device %s with %d storage(s)",
            self.mount_point,
            len(self._storages),
        )

    def close(self) -> None:
        """Forget every handle handed out during the session."""
        self._opened = False
        self._paths.clear()
        self._handles.clear()
        self._handle_storage.clear()

    def list_storages(self) -> List[Storage]:
        """List storages as found when the session was opened."""
        self._require_open()
        return [
            Storage(storage_id=storage_id, description=path.name)
            for storage_id, path in self._storages.items()
        ]

    # Objects

    def list_children(self, storage_id: int, parent_handle: int) -> List[int]:
        """List handles of the entries of a folder."""
        folder = self._path_for(storage_id, parent_handle)
        if not folder.is_dir():
            raise InvalidInputError("Object is not a folder", handle=parent_handle)
        try:
            children = sorted(folder.iterdir(), key=lambda p: p.name.lower())
        except OSError as e:
            raise TransientError(
                f"Cannot list folder: {e}", handle=parent_handle
            ) from e
        return [self._handle_for(child, storage_id) for child in children]

    def get_object_info(self, handle: int) -> DeviceObject:
        """Describe an object from its file system entry."""
        self._require_open()
        if handle == PARENT_ROOT:
            raise InvalidInputError("The storage root has no object info")
        path = self._known_path(handle)
        storage_id = self._handle_storage[handle]
        try:
            stat = path.stat()
        except FileNotFoundError as e:
            self._forget(handle)
            raise ObjectNotFoundError("Object no longer exists", handle=handle) from e
        except OSError as e:
            raise TransientError(f"Cannot read object info: {e}", handle=handle) from e

        is_dir = path.is_dir()
        return DeviceObject(
            handle=handle,
            parent_handle=self._parent_handle(path, storage_id),
            storage_id=storage_id,
            filename=path.name,
            format_code=FormatCode.FOLDER if is_dir else format_code_for(path.name),
            size_bytes=0 if is_dir else stat.st_size,
            modified=datetime.fromtimestamp(stat.st_mtime),
        )

    def set_object_info(
        self, storage_id: int, parent_handle: int, obj: DeviceObject
    ) -> int:
        """Create an object, or replace the metadata of a known one."""
        self._require_open()
        if obj.handle and obj.handle in self._paths:
            return self._replace_object_info(obj)

        self._check_filename(obj.filename)
        parent = self._path_for(storage_id, parent_handle)
        if not parent.is_dir():
            raise InvalidInputError("Parent is not a folder", handle=parent_handle)
        target = parent / obj.filename

        try:
            if obj.format_code == FormatCode.FOLDER:
                target.mkdir()
            else:
                if target.is_dir():
                    raise TransientError(
                        "A folder with this name exists", filename=obj.filename
                    )
                target.write_bytes(b"")
        except FileExistsError as e:
            raise TransientError(
                "Object already exists", filename=obj.filename, parent=parent_handle
            ) from e
        except OSError as e:
            raise TransientError(
                f"Cannot create object: {e}", filename=obj.filename
            ) from e

        return self._handle_for(target, storage_id)

    def send_object_bytes(self, handle: int, data: bytes, size: int) -> None:
        """Write object content."""
        path = self._known_path(handle)
        if path.is_dir():
            raise InvalidInputError("Cannot send data to a folder", handle=handle)
        try:
            with open(path, "wb") as f:
                f.write(data[:size])
        except OSError as e:
            raise TransientError(f"Transfer failed: {e}", handle=handle) from e

    def read_object_bytes(self, handle: int) -> bytes:
        """Read object content."""
        path = self._known_path(handle)
        try:
            return path.read_bytes()
        except FileNotFoundError as e:
            self._forget(handle)
            raise ObjectNotFoundError("Object no longer exists", handle=handle) from e
        except OSError as e:
            raise TransientError(f"Read failed: {e}", handle=handle) from e

    def delete_object(self, handle: int) -> None:
        """Delete a file or an empty folder."""
        if handle == PARENT_ROOT:
            raise InvalidInputError("The storage root cannot be deleted")
        path = self._known_path(handle)
        try:
            if path.is_dir():
                path.rmdir()
            else:
                path.unlink()
        except FileNotFoundError as e:
            self._forget(handle)
            raise ObjectNotFoundError("Object no longer exists", handle=handle) from e
        except OSError as e:
            raise TransientError(f"Delete failed: {e}", handle=handle) from e
        self._forget(handle)

    def walk(
        self, storage_id: int, root_path: str, recursive: bool = True
    ) -> Iterator[WalkEntry]:
        """Yield every object below ``root_path``."""
        storage_root = self._storage_root(storage_id)
        root = self._lookup_dir(storage_root, root_path)
        root_handle = (
            PARENT_ROOT if root == storage_root else self._handle_for(root, storage_id)
        )
        yield from self._walk_dir(
            storage_id, storage_root, root, root_handle, recursive
        )

    # Internals

    def _walk_dir(
        self,
        storage_id: int,
        storage_root: Path,
        folder: Path,
        folder_handle: int,
        recursive: bool,
    ) -> Iterator[WalkEntry]:
        try:
            children = sorted(folder.iterdir(), key=lambda p: p.name.lower())
        except OSError as e:
            raise TransientError(f"Cannot list folder: {e}", path=str(folder)) from e

        for child in children:
            handle = self._handle_for(child, storage_id)
            is_dir = child.is_dir()
            try:
                size = 0 if is_dir else child.stat().st_size
            except OSError as e:
                raise TransientError(
                    f"Cannot read object info: {e}", path=str(child)
                ) from e
            yield WalkEntry(
                handle=handle,
                path="/" + child.relative_to(storage_root).as_posix(),
                is_dir=is_dir,
                size=size,
                parent_handle=folder_handle,
            )
            if is_dir and recursive:
                yield from self._walk_dir(
                    storage_id, storage_root, child, handle, recursive
                )

    def _lookup_dir(self, storage_root: Path, root_path: str) -> Path:
        current = storage_root
        for part in [p for p in root_path.replace("\\", "/").split("/") if p]:
            match: Optional[Path] = None
            if current.is_dir():
                for child in current.iterdir():
                    if child.is_dir() and child.name.lower() == part.lower():
                        match = child
                        break
            if match is None:
                raise ObjectNotFoundError("Folder not found", path=root_path)
            current = match
        return current

    def _replace_object_info(self, obj: DeviceObject) -> int:
        path = self._known_path(obj.handle)
        if obj.filename and obj.filename != path.name:
            self._check_filename(obj.filename)
            target = path.with_name(obj.filename)
            if target.exists():
                raise TransientError("Object already exists", filename=obj.filename)
            try:
                path.rename(target)
            except OSError as e:
                raise TransientError(f"Rename failed: {e}", handle=obj.handle) from e
            storage_id = self._handle_storage[obj.handle]
            self._forget(obj.handle)
            self._register(target, obj.handle, storage_id)
            path = target

        if not path.is_dir() and obj.size_bytes == 0:
            try:
                path.write_bytes(b"")
            except OSError as e:
                raise TransientError(
                    f"Cannot update object info: {e}", handle=obj.handle
                ) from e
        return obj.handle

    def _require_open(self) -> None:
        if not self._opened:
            raise TransientError("Device session is not open")

    def _storage_root(self, storage_id: int) -> Path:
        self._require_open()
        try:
            return self._storages[storage_id]
        except KeyError as e:
            raise ObjectNotFoundError(
                "Unknown storage", storage_id=hex(storage_id)
            ) from e

    def _path_for(self, storage_id: int, handle: int) -> Path:
        if handle == PARENT_ROOT:
            return self._storage_root(storage_id)
        self._require_open()
        return self._known_path(handle)

    def _known_path(self, handle: int) -> Path:
        try:
            return self._paths[handle]
        except KeyError as e:
            raise ObjectNotFoundError("Unknown object handle", handle=handle) from e

    def _handle_for(self, path: Path, storage_id: int) -> int:
        handle = self._handles.get(path)
        if handle is None:
            handle = self._next_handle
            self._next_handle += 1
            self._register(path, handle, storage_id)
        return handle

    def _register(self, path: Path, handle: int, storage_id: int) -> None:
        self._paths[handle] = path
        self._handles[path] = handle
        self._handle_storage[handle] = storage_id

    def _forget(self, handle: int) -> None:
        path = self._paths.pop(handle, None)
        if path is not None:
            self._handles.pop(path, None)
        self._handle_storage.pop(handle, None)

    def _parent_handle(self, path: Path, storage_id: int) -> int:
        if path.parent == self._storages.get(storage_id):
            return PARENT_ROOT
        return self._handle_for(path.parent, storage_id)

    @staticmethod
    def _check_filename(filename: str) -> None:
        if not filename or filename in (".", "..") or "/" in filename:
            raise InvalidInputError("Invalid object name", filename=filename)
