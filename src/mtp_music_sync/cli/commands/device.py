"""Device detection command."""

import logging

import click
from rich.console import Console
from rich.table import Table

from ...core.errors import DeviceSyncError
from ...services import LibraryService
from ..display import display_storages
from .app import SyncApp

console = Console()
logger = logging.getLogger(__name__)


@click.command("scan")
@click.pass_obj
def scan_command(app: SyncApp) -> None:
    """Detect the device and summarize its storages."""
    session = app.open_session()
    try:
        service = LibraryService(session, app.config)
        with console.status("[bold green]Reading storages..."):
            storages = service.storages()
        console.print(
            f"\n[bold green]✅ Device found at {app.config.mount_point}[/bold green]"
        )
        display_storages(storages)

        summary = Table(show_header=True, header_style="bold magenta")
        summary.add_column("Storage", style="cyan")
        summary.add_column("Songs", justify="right")
        summary.add_column("Empty", justify="right")
        summary.add_column("Playlists", justify="right")
        for storage in storages:
            with console.status(f"[bold green]Scanning {storage.description}..."):
                result = service.scanner.scan(
                    storage.storage_id, app.config.catalog_roots
                )
            songs = 0 if result.only_empty_audio else len(result.audio)
            empty = str(len(result.empty_audio))
            if result.only_empty_audio:
                empty = f"[red]{empty}[/red]"
            summary.add_row(
                storage.description, str(songs), empty, str(len(result.playlists))
            )
        console.print(summary)
    except DeviceSyncError as e:
        logger.error("Scan failed: %s", e)
        console.print(f"[bold red]❌ Scan failed: {e}[/bold red]")
        raise click.Abort()
    finally:
        session.close()
