"""Models for the MTP music sync application."""

from .models import (
    BatchUploadResult,
    CatalogEntry,
    DeletionReport,
    DeviceObject,
    EntryKind,
    PARENT_ROOT,
    FormatCode,
    PlaylistDocument,
    PlaylistEntry,
    ScanResult,
    Storage,
    TransferJob,
    TransferOutcome,
    UploadedTrack,
    UploadResult,
    WalkEntry,
    format_code_for,
)

__all__ = [
    "BatchUploadResult",
    "CatalogEntry",
    "DeletionReport",
    "DeviceObject",
    "EntryKind",
    "FormatCode",
    "PARENT_ROOT",
    "PlaylistDocument",
    "PlaylistEntry",
    "ScanResult",
    "Storage",
    "TransferJob",
    "TransferOutcome",
    "UploadedTrack",
    "UploadResult",
    "WalkEntry",
    "format_code_for",
]
