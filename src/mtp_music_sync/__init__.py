"""MTP Music Sync.

Synchronizes music files and playlists onto portable devices that expose an
MTP-style object store. Provides path resolution over handle-based storage,
idempotent folder creation, retrying transfers and playlist maintenance.
"""

__version__ = "1.0.0"
__author__ = "Anton"
__email__ = ""

from .config import Config
from .models import CatalogEntry, DeviceObject, PlaylistDocument, Storage

__all__ = [
    "Config",
    "CatalogEntry",
    "DeviceObject",
    "PlaylistDocument",
    "Storage",
]
