"""Commands that list songs and playlists on the device."""

import logging

import click
from rich.console import Console

from ...core.errors import DeviceSyncError
from ..display import display_playlists, display_playlists_with_songs, display_songs
from .app import SyncApp

console = Console()
logger = logging.getLogger(__name__)


@click.command("songs")
@click.pass_obj
def songs_command(app: SyncApp) -> None:
    """List songs stored on the device."""
    try:
        with app.library() as (service, storage):
            with console.status("[bold green]Scanning songs..."):
                songs = service.list_songs(storage.storage_id)
        display_songs(songs)
    except DeviceSyncError as e:
        logger.error("Listing songs failed: %s", e)
        console.print(f"[bold red]❌ Listing songs failed: {e}[/bold red]")
        raise click.Abort()


@click.command("playlists")
@click.pass_obj
def playlists_command(app: SyncApp) -> None:
    """List playlists stored on the device."""
    try:
        with app.library() as (service, storage):
            with console.status("[bold green]Scanning playlists..."):
                playlists = service.list_playlists(storage.storage_id)
        display_playlists(playlists)
    except DeviceSyncError as e:
        logger.error("Listing playlists failed: %s", e)
        console.print(f"[bold red]❌ Listing playlists failed: {e}[/bold red]")
        raise click.Abort()


@click.command("show")
@click.pass_obj
def show_command(app: SyncApp) -> None:
    """Show playlists together with their songs."""
    try:
        with app.library() as (service, storage):
            with console.status("[bold green]Reading playlists..."):
                playlists = service.playlists_with_songs(storage.storage_id)
        display_playlists_with_songs(playlists)
    except DeviceSyncError as e:
        logger.error("Reading playlists failed: %s", e)
        console.print(f"[bold red]❌ Reading playlists failed: {e}[/bold red]")
        raise click.Abort()
