"""Commands that put music and playlists on the device."""

import logging
from pathlib import Path
from typing import Optional

import click
from rich.console import Console

from ...core.errors import DeviceSyncError, OperationCancelledError
from ...core.playlist import PathStyle
from ..display import choose_many, display_songs, display_upload_result
from .app import SyncApp

console = Console()
logger = logging.getLogger(__name__)


@click.command("upload")
@click.argument("path", type=click.Path(exists=True, path_type=Path))
@click.option(
    "--no-playlist",
    is_flag=True,
    help="Do not create a playlist when uploading a directory",
)
@click.option("--playlist-name", help="Name of the playlist (default: directory name)")
@click.pass_obj
def upload_command(
    app: SyncApp, path: Path, no_playlist: bool, playlist_name: Optional[str]
) -> None:
    """Upload an MP3 file or a directory of MP3 files.

    Files are stored under MUSIC/<ARTIST>/<ALBUM>/ according to their tags.
    A directory upload also creates a playlist of the uploaded tracks.
    """
    try:
        with app.library() as (service, storage):
            if path.is_dir():
                result = service.upload_directory(
                    storage.storage_id,
                    path,
                    create_playlist=not no_playlist,
                    playlist_name=playlist_name,
                )
                display_upload_result(result)
                return

            with console.status(f"[bold green]Uploading {path.name}..."):
                track = service.upload_file(storage.storage_id, path)
        if track.partial:
            console.print(
                f"[yellow]⚠️  Only part of {path.name} reached the device "
                f"({track.logical_path})[/yellow]"
            )
        else:
            console.print(f"[green]✓ Uploaded to {track.logical_path}[/green]")
    except OperationCancelledError:
        console.print("[yellow]Upload cancelled[/yellow]")
    except DeviceSyncError as e:
        logger.error("Upload failed: %s", e)
        console.print(f"[bold red]❌ Upload failed: {e}[/bold red]")
        raise click.Abort()


@click.command("create-playlist")
@click.argument("name")
@click.option(
    "--style",
    type=click.IntRange(1, 4),
    help="Path style: 1=0:/MUSIC/..., 2=/MUSIC/..., 3=MUSIC/..., 4=0:/Music/...",
)
@click.pass_obj
def create_playlist_command(app: SyncApp, name: str, style: Optional[int]) -> None:
    """Create a playlist NAME from songs already on the device."""
    try:
        with app.library() as (service, storage):
            with console.status("[bold green]Scanning songs..."):
                songs = service.list_songs(storage.storage_id)
            if not songs:
                console.print("[yellow]No songs found on device[/yellow]")
                return

            display_songs(songs, numbered=True)
            selected = choose_many(songs, "Songs to add")
            entry = service.create_playlist(
                storage.storage_id,
                name,
                [song.logical_path for song in selected],
                path_style=PathStyle(style) if style else None,
            )
        console.print(
            f"[green]✓ Created {entry.logical_path} "
            f"with {len(selected)} songs[/green]"
        )
    except DeviceSyncError as e:
        logger.error("Creating playlist failed: %s", e)
        console.print(f"[bold red]❌ Creating playlist failed: {e}[/bold red]")
        raise click.Abort()
