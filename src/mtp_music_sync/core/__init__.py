"""Core sync engine: transport session, path resolution and transfers."""

from .catalog import CatalogScanner
from .errors import (
    DeviceSyncError,
    DeviceTimeoutError,
    InvalidInputError,
    ObjectNotFoundError,
    OperationCancelledError,
    PartialFailureError,
    RetryExhaustedError,
    SafetyRejectedError,
    TooLargeError,
    TransientError,
)
from .folders import FolderNavigator
from .resolver import PathResolver
from .retry import RetryOutcome, RetryResult, with_retry
from .transfer import Confirmer, Deleter, Uploader

__all__ = [
    "CatalogScanner",
    "Confirmer",
    "Deleter",
    "DeviceSyncError",
    "DeviceTimeoutError",
    "FolderNavigator",
    "InvalidInputError",
    "ObjectNotFoundError",
    "OperationCancelledError",
    "PartialFailureError",
    "PathResolver",
    "RetryExhaustedError",
    "RetryOutcome",
    "RetryResult",
    "SafetyRejectedError",
    "TooLargeError",
    "TransientError",
    "Uploader",
    "with_retry",
]
