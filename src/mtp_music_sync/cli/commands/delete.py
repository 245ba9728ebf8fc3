"""Commands that remove music and playlists from the device."""

import logging
from typing import Optional

import click
from rich.console import Console

from ...core.errors import (
    DeviceSyncError,
    ObjectNotFoundError,
    OperationCancelledError,
    PartialFailureError,
    SafetyRejectedError,
)
from ..display import (
    choose_from_list,
    display_deletion_report,
    display_playlists,
    display_songs,
)
from .app import SyncApp

console = Console()
logger = logging.getLogger(__name__)


def _report_partial(e: PartialFailureError) -> None:
    console.print(f"[yellow]⚠️  {e.message}[/yellow]")
    if e.report is not None:
        display_deletion_report(e.report)


@click.command("delete-playlist")
@click.argument("name", required=False)
@click.option("--with-songs", is_flag=True, help="Also delete the playlist's songs")
@click.pass_obj
def delete_playlist_command(
    app: SyncApp, name: Optional[str], with_songs: bool
) -> None:
    """Delete a playlist, optionally together with its songs."""
    try:
        with app.library() as (service, storage):
            if name:
                playlist = service.find_playlist(name, storage.storage_id)
            else:
                playlists = service.list_playlists(storage.storage_id)
                if not playlists:
                    console.print("[yellow]No playlists found on device[/yellow]")
                    return
                display_playlists(playlists, numbered=True)
                playlist = choose_from_list(playlists, "Playlist to delete")

            if with_songs:
                report = service.delete_playlist_and_songs(playlist)
                display_deletion_report(report)
            else:
                service.delete_playlist(playlist)
        console.print(f"[green]✓ Deleted {playlist.filename}[/green]")
    except OperationCancelledError:
        console.print("[yellow]Deletion cancelled[/yellow]")
    except PartialFailureError as e:
        _report_partial(e)
        raise click.Abort()
    except ObjectNotFoundError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise click.Abort()
    except DeviceSyncError as e:
        logger.error("Deleting playlist failed: %s", e)
        console.print(f"[bold red]❌ Deleting playlist failed: {e}[/bold red]")
        raise click.Abort()


@click.command("delete-song")
@click.pass_obj
def delete_song_command(app: SyncApp) -> None:
    """Pick a song on the device and delete it."""
    try:
        with app.library() as (service, storage):
            songs = service.list_songs(storage.storage_id)
            if not songs:
                console.print("[yellow]No songs found on device[/yellow]")
                return
            display_songs(songs, numbered=True)
            song = choose_from_list(songs, "Song to delete")
            service.delete_song(song)
        console.print(f"[green]✓ Deleted {song.logical_path}[/green]")
    except OperationCancelledError:
        console.print("[yellow]Deletion cancelled[/yellow]")
    except DeviceSyncError as e:
        logger.error("Deleting song failed: %s", e)
        console.print(f"[bold red]❌ Deleting song failed: {e}[/bold red]")
        raise click.Abort()


@click.command("delete-folder")
@click.argument("name", required=False)
@click.option(
    "--music-root",
    is_flag=True,
    help="Delete EVERYTHING in the music folder (asks for a typed phrase)",
)
@click.pass_obj
def delete_folder_command(
    app: SyncApp, name: Optional[str], music_root: bool
) -> None:
    """Delete a folder below the music folder with all its content.

    NAME is a path below the music folder, e.g. ARTIST or ARTIST/ALBUM. Without
    NAME the folders of the music folder are offered for selection.
    """
    try:
        with app.library() as (service, storage):
            if music_root:
                path = service.music_root
            elif name:
                path = f"{service.music_root}/{name.strip('/')}"
            else:
                folders = service.music_subfolders(storage.storage_id)
                if not folders:
                    console.print("[yellow]No folders found in music folder[/yellow]")
                    return
                for index, folder in enumerate(folders, start=1):
                    console.print(f"  {index:>3}. {folder.filename}")
                folder = choose_from_list(folders, "Folder to delete")
                path = f"{service.music_root}/{folder.filename}"

            report = service.delete_folder(storage.storage_id, path)
        display_deletion_report(report)
        console.print(f"[green]✓ Deleted {path}[/green]")
    except SafetyRejectedError as e:
        console.print(f"[bold red]✗ Refused: {e}[/bold red]")
        raise click.Abort()
    except OperationCancelledError:
        console.print("[yellow]Deletion cancelled[/yellow]")
    except PartialFailureError as e:
        _report_partial(e)
        raise click.Abort()
    except DeviceSyncError as e:
        logger.error("Deleting folder failed: %s", e)
        console.print(f"[bold red]❌ Deleting folder failed: {e}[/bold red]")
        raise click.Abort()
