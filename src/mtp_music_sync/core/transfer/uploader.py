"""Upload objects to the device with retries and verification."""

import logging
from typing import Optional

from ...models import (
    DeviceObject,
    FormatCode,
    TransferJob,
    TransferOutcome,
    UploadResult,
    format_code_for,
)
from ..errors import DeviceSyncError, InvalidInputError, TooLargeError
from ..retry import RetryOutcome, with_retry
from ..transport.session import DeviceSession

MAX_UPLOAD_BYTES = 10 * 1024 * 1024
PARTIAL_TRANSFER_BYTES = 1024 * 1024


class Uploader:
    """Send files to the device.

    The payload send is attempted once, retried immediately with a fresh
    buffer and retried once more after ``send_retry_delay``. When all three
    fail and the payload is larger than ``partial_transfer_bytes``, only its
    first ``partial_transfer_bytes`` are sent; the result is then marked
    DEGRADED.
    """

    def __init__(
        self,
        session: DeviceSession,
        max_upload_bytes: int = MAX_UPLOAD_BYTES,
        partial_transfer_bytes: int = PARTIAL_TRANSFER_BYTES,
        metadata_attempts: int = 3,
        metadata_retry_delay: float = 1.0,
        send_retry_delay: float = 2.0,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """Initialize uploader.

        Args:
            session: Device session
            max_upload_bytes: Largest accepted payload
            partial_transfer_bytes: Size of the last-resort truncated send
            metadata_attempts: Attempts to register object metadata
            metadata_retry_delay: Seconds between metadata attempts
            send_retry_delay: Seconds before the last full send attempt
            logger: Logger to use instead of the module logger
        """
        self.session = session
        self.max_upload_bytes = max_upload_bytes
        self.partial_transfer_bytes = partial_transfer_bytes
        self.metadata_attempts = metadata_attempts
        self.metadata_retry_delay = metadata_retry_delay
        self.send_retry_delay = send_retry_delay
        self.logger = logger or logging.getLogger(__name__)

    def check_size(self, size: int, filename: str = "") -> None:
        """Reject payloads above the upload limit.

        Raises:
            TooLargeError: If ``size`` exceeds ``max_upload_bytes``
        """
        if size > self.max_upload_bytes:
            raise TooLargeError(
                "File too large for device",
                filename=filename or None,
                size=size,
                limit=self.max_upload_bytes,
            )

    def upload_bytes(
        self,
        storage_id: int,
        parent_handle: int,
        filename: str,
        data: bytes,
        format_code: Optional[int] = None,
    ) -> UploadResult:
        """Upload an in-memory payload.

        Args:
            storage_id: Target storage
            parent_handle: Target folder handle
            filename: Object name on the device
            data: Payload
            format_code: Object format, derived from the extension if omitted

        Returns:
            UploadResult describing the transfer
        """
        self.check_size(len(data), filename)
        if format_code is None:
            format_code = format_code_for(filename)
        job = TransferJob(
            source_bytes=data,
            target_parent_handle=parent_handle,
            target_filename=filename,
            expected_size=len(data),
            format_code=format_code,
        )
        return self.upload(storage_id, job)

    def upload(self, storage_id: int, job: TransferJob) -> UploadResult:
        """Run a transfer job.

        Args:
            storage_id: Target storage
            job: Transfer to perform

        Returns:
            UploadResult, DEGRADED when only part of the payload was sent

        Raises:
            TooLargeError: If the payload exceeds the limit; raised before any
                transport call
            InvalidInputError: If the job has no target file name
            RetryExhaustedError: If registration or every send attempt failed
        """
        self.check_size(job.expected_size, job.target_filename)
        if not job.target_filename.strip():
            raise InvalidInputError("Upload target needs a file name")

        try:
            data = job.load_bytes()
        except OSError as e:
            raise InvalidInputError(
                f"Cannot read upload source: {e}", source=str(job.source_file)
            ) from e
        self.check_size(len(data), job.target_filename)
        size = len(data)

        format_code = job.format_code
        if format_code == FormatCode.UNDEFINED:
            format_code = format_code_for(job.target_filename)

        info = DeviceObject(
            parent_handle=job.target_parent_handle,
            storage_id=storage_id,
            filename=job.target_filename,
            format_code=format_code,
            size_bytes=size,
        )
        handle = with_retry(
            lambda: self.session.set_object_info(
                storage_id, job.target_parent_handle, info
            ),
            attempts=self.metadata_attempts,
            delay=self.metadata_retry_delay,
            description=f"register {job.target_filename}",
            log=self.logger,
        ).unwrap(
            "Could not register object",
            filename=job.target_filename,
            parent=job.target_parent_handle,
        )
        self.logger.debug("Registered %s as handle %d", job.target_filename, handle)

        def send() -> int:
            self.session.send_object_bytes(handle, bytes(data), size)
            return size

        fallback = None
        if size > self.partial_transfer_bytes:
            limit = self.partial_transfer_bytes

            def send_partial() -> int:
                self.logger.warning(
                    "Sending only the first %d of %d bytes of %s",
                    limit,
                    size,
                    job.target_filename,
                )
                self.session.send_object_bytes(handle, data[:limit], limit)
                return limit

            fallback = send_partial

        sent = with_retry(
            send,
            attempts=3,
            delay=(0.0, self.send_retry_delay),
            fallback=fallback,
            description=f"send {job.target_filename}",
            log=self.logger,
        )
        bytes_sent = sent.unwrap(
            "Transfer failed", filename=job.target_filename, handle=handle
        )

        outcome = (
            TransferOutcome.DEGRADED
            if sent.outcome == RetryOutcome.DEGRADED
            else TransferOutcome.SUCCESS
        )
        verified = self._verify(storage_id, job, handle, size)

        if outcome == TransferOutcome.DEGRADED:
            self.logger.warning(
                "Partial upload of %s: %d of %d bytes",
                job.target_filename,
                bytes_sent,
                size,
            )
        else:
            self.logger.info("Uploaded %s (%d bytes)", job.target_filename, size)

        return UploadResult(
            handle=handle,
            filename=job.target_filename,
            outcome=outcome,
            bytes_sent=bytes_sent,
            expected_size=size,
            verified=verified,
        )

    def _verify(
        self, storage_id: int, job: TransferJob, handle: int, expected_size: int
    ) -> bool:
        try:
            reported = self.session.get_object_info(handle).size_bytes
        except DeviceSyncError as e:
            self.logger.warning(
                "Could not read back %s (%s), checking parent folder",
                job.target_filename,
                e,
            )
            reported = self._size_from_parent(storage_id, job)
            if reported is None:
                self.logger.warning(
                    "Uploaded object %s not found on device", job.target_filename
                )
                return False

        if reported != expected_size:
            self.logger.warning(
                "Size mismatch for %s: expected %d, device reports %d",
                job.target_filename,
                expected_size,
                reported,
            )
            return False
        return True

    def _size_from_parent(self, storage_id: int, job: TransferJob) -> Optional[int]:
        try:
            children = self.session.list_child_objects(
                storage_id, job.target_parent_handle
            )
        except DeviceSyncError as e:
            self.logger.warning("Could not list upload folder: %s", e)
            return None
        for child in children:
            if child.filename.lower() == job.target_filename.lower():
                return child.size_bytes
        return None
