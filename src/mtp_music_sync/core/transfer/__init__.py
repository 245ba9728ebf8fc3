"""Upload and delete operations."""

from .confirm import ERASE_PHRASE, AssumeYesConfirmer, Confirmer
from .deleter import Deleter
from .uploader import MAX_UPLOAD_BYTES, PARTIAL_TRANSFER_BYTES, Uploader

__all__ = [
    "AssumeYesConfirmer",
    "Confirmer",
    "Deleter",
    "ERASE_PHRASE",
    "MAX_UPLOAD_BYTES",
    "PARTIAL_TRANSFER_BYTES",
    "Uploader",
]
