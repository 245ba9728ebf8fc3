"""Display helpers for CLI output."""

from .formatters import (
    display_deletion_report,
    display_playlists,
    display_playlists_with_songs,
    display_songs,
    display_storages,
    display_upload_result,
)
from .prompts import ClickConfirmer, choose_from_list, choose_many

__all__ = [
    "ClickConfirmer",
    "choose_from_list",
    "choose_many",
    "display_deletion_report",
    "display_playlists",
    "display_playlists_with_songs",
    "display_songs",
    "display_storages",
    "display_upload_result",
]
