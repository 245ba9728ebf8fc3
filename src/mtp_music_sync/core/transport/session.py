"""Serialized device session with bounded-wait connect and storage fetch."""

import logging
import queue
import threading
from typing import Any, Callable, Iterator, List, Optional, Tuple, TypeVar

from ...models import DeviceObject, Storage, WalkEntry
from ..errors import (
    DeviceTimeoutError,
    ObjectNotFoundError,
    RetryExhaustedError,
    TransientError,
)
from ..retry import with_retry
from .base import TransportGateway

T = TypeVar("T")

DEFAULT_TIMEOUT = 30.0


class DeviceSession(TransportGateway):
    """Wrap a transport so that only one call is in flight at a time.

    Opening the device and listing its storages are the only calls that run
    on a helper thread; they race against a timeout and a late result is
    discarded. All other calls execute on the calling thread while holding
    the session lock. Object info lookups and child listings are retried a
    few times because devices frequently report themselves busy.
    """

    def __init__(
        self,
        transport: TransportGateway,
        info_attempts: int = 3,
        info_retry_delay: float = 0.1,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """Initialize session.

        Args:
            transport: Underlying gateway
            info_attempts: Attempts for object info and child listings
            info_retry_delay: Seconds between those attempts
            logger: Logger to use instead of the module logger
        """
        self.transport = transport
        self.info_attempts = info_attempts
        self.info_retry_delay = info_retry_delay
        self.logger = logger or logging.getLogger(__name__)
        self._lock = threading.RLock()
        self._connected = False

    @property
    def connected(self) -> bool:
        """Check whether :meth:`connect` succeeded."""
        return self._connected

    def connect(self, timeout: float = DEFAULT_TIMEOUT) -> None:
        """Open the device, giving up after ``timeout`` seconds.

        Raises:
            DeviceTimeoutError: If the device did not answer in time
        """
        with self._lock:
            self.logger.info("Connecting to device (timeout %.0fs)", timeout)
            self._race(self.transport.open, timeout, "connect")
            self._connected = True
            self.logger.info("Device connected")

    def fetch_storages(self, timeout: float = DEFAULT_TIMEOUT) -> List[Storage]:
        """List storages, giving up after ``timeout`` seconds.

        Raises:
            DeviceTimeoutError: If the device did not answer in time
            ObjectNotFoundError: If the device reports no storage
        """
        with self._lock:
            storages = self._race(
                self.transport.list_storages, timeout, "storage fetch"
            )
        if not storages:
            raise ObjectNotFoundError("No storage found on device")
        for storage in storages:
            self.logger.debug(
                "Storage %#010x: %s", storage.storage_id, storage.description
            )
        return storages

    def _race(self, call: Callable[[], T], timeout: float, what: str) -> T:
        """Run ``call`` on a daemon thread and wait at most ``timeout`` seconds.

        A call still running after the timeout is abandoned. Its thread is a
        daemon, so a hung device cannot keep the process alive on exit.
        """
        results: "queue.Queue[Tuple[bool, Any]]" = queue.Queue(maxsize=1)

        def run() -> None:
            try:
                results.put((True, call()))
            except Exception as e:
                results.put((False, e))

        worker = threading.Thread(
            target=run, name=f"mtp-session-{what.replace(' ', '-')}", daemon=True
        )
        worker.start()
        try:
            succeeded, value = results.get(timeout=timeout)
        except queue.Empty as e:
            self.logger.error("Device %s timed out after %.1fs", what, timeout)
            raise DeviceTimeoutError(
                f"Device {what} timed out", timeout=timeout
            ) from e
        if not succeeded:
            raise value
        return value

    # TransportGateway

    def open(self) -> None:
        """Open the device without a time limit."""
        with self._lock:
            self.transport.open()
            self._connected = True

    def close(self) -> None:
        """Close the device session."""
        with self._lock:
            if self._connected:
                self.transport.close()
                self._connected = False
                self.logger.info("Device disconnected")

    def list_storages(self) -> List[Storage]:
        """List storages without a time limit."""
        with self._lock:
            return self.transport.list_storages()

    def list_children(self, storage_id: int, parent_handle: int) -> List[int]:
        """List child handles, retrying transient failures."""
        with self._lock:
            return self._retried(
                lambda: self.transport.list_children(storage_id, parent_handle),
                f"list children of {parent_handle}",
            )

    def get_object_info(self, handle: int) -> DeviceObject:
        """Read object metadata, retrying transient failures."""
        with self._lock:
            return self._retried(
                lambda: self.transport.get_object_info(handle),
                f"get object info {handle}",
            )

    def set_object_info(
        self, storage_id: int, parent_handle: int, obj: DeviceObject
    ) -> int:
        """Register object metadata."""
        with self._lock:
            return self.transport.set_object_info(storage_id, parent_handle, obj)

    def send_object_bytes(self, handle: int, data: bytes, size: int) -> None:
        """Send object content."""
        with self._lock:
            self.transport.send_object_bytes(handle, data, size)

    def read_object_bytes(self, handle: int) -> bytes:
        """Read object content."""
        with self._lock:
            return self.transport.read_object_bytes(handle)

    def delete_object(self, handle: int) -> None:
        """Delete an object."""
        with self._lock:
            self.transport.delete_object(handle)

    def walk(
        self, storage_id: int, root_path: str, recursive: bool = True
    ) -> Iterator[WalkEntry]:
        """Walk a folder tree while holding the session lock."""
        with self._lock:
            yield from self.transport.walk(storage_id, root_path, recursive)

    # Helpers

    def list_child_objects(
        self, storage_id: int, parent_handle: int
    ) -> List[DeviceObject]:
        """Describe every child of a folder.

        Children whose metadata cannot be read are skipped with a warning.

        Args:
            storage_id: Storage to look in
            parent_handle: Folder handle, 0 for the storage root

        Returns:
            Metadata of the readable children
        """
        objects = []
        with self._lock:
            for handle in self.list_children(storage_id, parent_handle):
                try:
                    objects.append(self.get_object_info(handle))
                except (TransientError, RetryExhaustedError, ObjectNotFoundError) as e:
                    self.logger.warning("Skipping object %d: %s", handle, e)
        return objects

    def _retried(self, call: Callable[[], T], description: str) -> T:
        result = with_retry(
            call,
            attempts=self.info_attempts,
            delay=self.info_retry_delay,
            description=description,
            log=self.logger,
        )
        return result.unwrap(f"Device call failed: {description}")
