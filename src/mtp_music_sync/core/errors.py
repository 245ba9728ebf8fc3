"""Error types raised by the sync engine."""

from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from ..models import DeletionReport


class DeviceSyncError(Exception):
    """Base class for all sync engine errors.

    Keyword arguments passed at construction are kept in ``context`` and
    appended to the message, so a wrapped error still names the path or
    handle it was about.
    """

    def __init__(self, message: str, **context: Any) -> None:
        """Initialize error with a message and optional context."""
        self.message = message
        self.context: Dict[str, Any] = {
            key: value for key, value in context.items() if value is not None
        }
        super().__init__(self._render())

    def _render(self) -> str:
        if not self.context:
            return self.message
        details = ", ".join(f"{key}={value!r}" for key, value in self.context.items())
        return f"{self.message} ({details})"


class TransientError(DeviceSyncError):
    """A transport call failed in a way that may succeed when retried."""

    pass


class DeviceTimeoutError(TransientError):
    """The device did not answer within the allowed time."""

    pass


class RetryExhaustedError(DeviceSyncError):
    """Every attempt of a retried operation failed."""

    pass


class ObjectNotFoundError(DeviceSyncError):
    """No device object matches the requested path or handle."""

    pass


class InvalidInputError(DeviceSyncError):
    """Request rejected before any transport call was made."""

    pass


class TooLargeError(InvalidInputError):
    """Payload exceeds the maximum upload size."""

    pass


class PartialFailureError(DeviceSyncError):
    """Operation completed but some items failed."""

    def __init__(
        self,
        message: str,
        report: Optional["DeletionReport"] = None,
        **context: Any,
    ) -> None:
        """Initialize error with the report of what was done."""
        self.report = report
        if report is not None:
            context.setdefault("failed_items", report.failed_items)
        super().__init__(message, **context)


class SafetyRejectedError(DeviceSyncError):
    """Destructive request refused by the safety gate."""

    pass


class OperationCancelledError(DeviceSyncError):
    """User declined a confirmation prompt."""

    pass


_BUSY_MARKERS = (
    "access denied",
    "busy",
    "in use",
    "cannot open device",
    "resource unavailable",
)


def is_device_busy(error: BaseException) -> bool:
    """Check whether an error suggests another program holds the device."""
    text = str(error).lower()
    return any(marker in text for marker in _BUSY_MARKERS)
