"""CLI command modules."""

from .app import SyncApp
from .delete import delete_folder_command, delete_playlist_command, delete_song_command
from .device import scan_command
from .library import playlists_command, show_command, songs_command
from .upload import create_playlist_command, upload_command

__all__ = [
    "SyncApp",
    "create_playlist_command",
    "delete_folder_command",
    "delete_playlist_command",
    "delete_song_command",
    "playlists_command",
    "scan_command",
    "show_command",
    "songs_command",
    "upload_command",
]
