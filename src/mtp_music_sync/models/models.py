"""Data models for the MTP music sync application."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntEnum
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

PARENT_ROOT = 0


class FormatCode(IntEnum):
    """Object format codes understood by MTP devices."""

    UNDEFINED = 0x3000
    FOLDER = 0x3001
    AUDIO = 0xB901
    PLAYLIST = 0xBA05


AUDIO_EXTENSIONS = (".mp3",)
PLAYLIST_EXTENSIONS = (".m3u", ".m3u8", ".pls")


def format_code_for(filename: str) -> FormatCode:
    """Pick the object format code for a file name.

    Args:
        filename: Object file name

    Returns:
        Format code derived from the file extension
    """
    suffix = Path(filename).suffix.lower()
    if suffix in AUDIO_EXTENSIONS:
        return FormatCode.AUDIO
    if suffix in PLAYLIST_EXTENSIONS:
        return FormatCode.PLAYLIST
    return FormatCode.UNDEFINED


class Storage(BaseModel):
    """A storage area on the device (internal memory, SD card)."""

    storage_id: int
    description: str = ""


class DeviceObject(BaseModel):
    """One node of the device object store."""

    handle: int = 0
    parent_handle: int = PARENT_ROOT
    storage_id: int = 0
    filename: str
    format_code: int = FormatCode.UNDEFINED
    size_bytes: int = 0
    modified: Optional[datetime] = None

    @property
    def is_folder(self) -> bool:
        """Check whether the object is a folder."""
        return self.format_code == FormatCode.FOLDER

    @field_validator("size_bytes")
    @classmethod
    def validate_size(cls, v: int) -> int:
        """Reject negative object sizes."""
        if v < 0:
            raise ValueError("size_bytes must not be negative")
        return v


class WalkEntry(BaseModel):
    """Item produced by a recursive walk of a storage."""

    handle: int
    path: str
    is_dir: bool
    size: int = 0
    parent_handle: int = PARENT_ROOT


class EntryKind(str, Enum):
    """Classification of catalogued objects."""

    AUDIO = "audio"
    PLAYLIST = "playlist"


class CatalogEntry(BaseModel):
    """Flattened view of a device object, built by a single scan."""

    logical_path: str
    handle: int
    storage_id: int
    parent_handle: int = PARENT_ROOT
    display_name: str = ""
    size_bytes: int = 0
    kind: EntryKind = EntryKind.AUDIO

    @property
    def filename(self) -> str:
        """Get the last path segment."""
        return self.logical_path.rstrip("/").rsplit("/", 1)[-1]

    @property
    def name(self) -> str:
        """Get the file name without extension."""
        return Path(self.filename).stem


class PlaylistEntry(BaseModel):
    """One track reference inside a playlist."""

    display_name: str = ""
    path: str

    @field_validator("path")
    @classmethod
    def validate_path(cls, v: str) -> str:
        """Ensure the entry references a path."""
        v = v.strip()
        if not v:
            raise ValueError("playlist entry path must not be empty")
        return v


class PlaylistDocument(BaseModel):
    """An ordered playlist.

    Entries are replaced as a whole, never edited in place.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    entries: List[PlaylistEntry] = []

    @property
    def paths(self) -> List[str]:
        """Get the entry paths in playlist order."""
        return [entry.path for entry in self.entries]

    def with_entries(self, entries: List[PlaylistEntry]) -> "PlaylistDocument":
        """Return a copy of the document with its entry list replaced."""
        return PlaylistDocument(name=self.name, entries=list(entries))


class TransferJob(BaseModel):
    """A pending upload of one file to the device."""

    source_bytes: Optional[bytes] = None
    source_file: Optional[Path] = None
    target_parent_handle: int
    target_filename: str
    expected_size: int = 0
    format_code: int = FormatCode.UNDEFINED

    @model_validator(mode="after")
    def check_source(self) -> "TransferJob":
        """Require exactly one payload source and fill in the expected size."""
        if (self.source_bytes is None) == (self.source_file is None):
            raise ValueError("exactly one of source_bytes or source_file is required")
        if not self.expected_size:
            if self.source_bytes is not None:
                self.expected_size = len(self.source_bytes)
            elif self.source_file is not None and self.source_file.exists():
                self.expected_size = self.source_file.stat().st_size
        return self

    def load_bytes(self) -> bytes:
        """Read the payload to be sent."""
        if self.source_bytes is not None:
            return self.source_bytes
        if self.source_file is None:
            raise ValueError("transfer job has no payload")
        return self.source_file.read_bytes()


class TransferOutcome(str, Enum):
    """How an upload finished."""

    SUCCESS = "success"
    DEGRADED = "degraded"


class UploadResult(BaseModel):
    """Result of sending one object to the device."""

    handle: int
    filename: str
    outcome: TransferOutcome = TransferOutcome.SUCCESS
    bytes_sent: int = 0
    expected_size: int = 0
    verified: bool = False

    @property
    def is_partial(self) -> bool:
        """Check whether only part of the payload reached the device."""
        return self.outcome == TransferOutcome.DEGRADED


class UploadedTrack(BaseModel):
    """A track that was uploaded into the music library."""

    logical_path: str
    handle: int
    display_name: str = ""
    source_file: Optional[Path] = None
    partial: bool = False


@dataclass
class ScanResult:
    """Objects found by one catalog scan."""

    audio: List[CatalogEntry] = field(default_factory=list)
    playlists: List[CatalogEntry] = field(default_factory=list)
    empty_audio: List[CatalogEntry] = field(default_factory=list)
    only_empty_audio: bool = False
    failed_roots: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert scan counts to dictionary."""
        return {
            "audio": len(self.audio),
            "playlists": len(self.playlists),
            "empty_audio": len(self.empty_audio),
            "only_empty_audio": self.only_empty_audio,
            "failed_roots": list(self.failed_roots),
        }


@dataclass
class DeletionReport:
    """Counts collected while deleting objects from the device."""

    deleted_files: int = 0
    deleted_folders: int = 0
    failed_items: int = 0
    errors: List[str] = field(default_factory=list)

    def merge(self, other: "DeletionReport") -> None:
        """Add the counts of a nested deletion."""
        self.deleted_files += other.deleted_files
        self.deleted_folders += other.deleted_folders
        self.failed_items += other.failed_items
        self.errors.extend(other.errors)

    def record_failure(self, message: str) -> None:
        """Count one item that could not be deleted."""
        self.failed_items += 1
        self.errors.append(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert report to dictionary."""
        return {
            "deleted_files": self.deleted_files,
            "deleted_folders": self.deleted_folders,
            "failed_items": self.failed_items,
            "errors": list(self.errors),
        }


@dataclass
class BatchUploadResult:
    """Result of uploading a directory of tracks."""

    uploaded: List[UploadedTrack] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    playlist: Optional[CatalogEntry] = None

    @property
    def success_count(self) -> int:
        """Number of tracks that reached the device."""
        return len(self.uploaded)
