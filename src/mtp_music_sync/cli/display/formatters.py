"""Display formatters for CLI output."""

from typing import List, Tuple

from rich.console import Console
from rich.table import Table

from ...models import BatchUploadResult, CatalogEntry, DeletionReport, Storage

console = Console()

SONGS_PER_PLAYLIST = 10


def _format_size(size: int) -> str:
    if size >= 1024 * 1024:
        return f"{size / (1024 * 1024):.1f} MB"
    if size >= 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size} B"


def display_storages(storages: List[Storage]) -> None:
    """Display the storages of a device.

    Args:
        storages: Storages to list
    """
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Storage ID", style="cyan")
    table.add_column("Description", style="green")

    for index, storage in enumerate(storages, start=1):
        table.add_row(str(index), f"{storage.storage_id:#010x}", storage.description)
    console.print(table)


def display_songs(songs: List[CatalogEntry], numbered: bool = False) -> None:
    """Display songs found on the device.

    Args:
        songs: Catalog entries to list
        numbered: Show a selection number column
    """
    if not songs:
        console.print("[yellow]No songs found on device[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    if numbered:
        table.add_column("#", style="dim", justify="right")
    table.add_column("Song", style="cyan")
    table.add_column("Path", style="green")
    table.add_column("Size", justify="right")

    for index, song in enumerate(songs, start=1):
        size = _format_size(song.size_bytes)
        if song.size_bytes == 0:
            size = "[red]empty[/red]"
        row = [song.display_name, song.logical_path, size]
        if numbered:
            row.insert(0, str(index))
        table.add_row(*row)

    console.print(table)
    console.print(f"[dim]{len(songs)} song(s)[/dim]")


def display_playlists(playlists: List[CatalogEntry], numbered: bool = False) -> None:
    """Display playlists found on the device.

    Args:
        playlists: Playlist entries to list
        numbered: Show a selection number column
    """
    if not playlists:
        console.print("[yellow]No playlists found on device[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    if numbered:
        table.add_column("#", style="dim", justify="right")
    table.add_column("Playlist", style="cyan")
    table.add_column("Path", style="green")

    for index, playlist in enumerate(playlists, start=1):
        row = [playlist.name, playlist.logical_path]
        if numbered:
            row.insert(0, str(index))
        table.add_row(*row)
    console.print(table)


def display_playlists_with_songs(
    playlists: List[Tuple[CatalogEntry, List[str]]],
) -> None:
    """Display playlists and the first songs of each."""
    if not playlists:
        console.print("[yellow]No playlists found on device[/yellow]")
        return

    for playlist, paths in playlists:
        console.print(
            f"\n[bold cyan]{playlist.name}[/bold cyan] [dim]({len(paths)} songs)[/dim]"
        )
        for path in paths[:SONGS_PER_PLAYLIST]:
            console.print(f"  • {path}")
        if len(paths) > SONGS_PER_PLAYLIST:
            console.print(f"  ... and {len(paths) - SONGS_PER_PLAYLIST} more")


def display_upload_result(result: BatchUploadResult) -> None:
    """Display the summary of a directory upload."""
    console.print("\n[bold green]📊 Upload Summary[/bold green]")

    table = Table(show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green", justify="right")
    table.add_row("Uploaded", str(result.success_count))
    table.add_row("Failed", str(len(result.errors)))
    partial = sum(1 for track in result.uploaded if track.partial)
    if partial:
        table.add_row("Partial uploads", f"[yellow]{partial}[/yellow]")
    if result.playlist is not None:
        table.add_row("Playlist", result.playlist.logical_path)
    console.print(table)

    if result.errors:
        console.print(f"\n[red]⚠️  {len(result.errors)} error(s) occurred:[/red]")
        for error in result.errors[:10]:
            console.print(f"  • {error}")
        if len(result.errors) > 10:
            console.print(f"  ... and {len(result.errors) - 10} more")


def display_deletion_report(report: DeletionReport) -> None:
    """Display what a delete operation removed."""
    table = Table(show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green", justify="right")
    table.add_row("Files deleted", str(report.deleted_files))
    table.add_row("Folders deleted", str(report.deleted_folders))
    if report.failed_items:
        table.add_row("Failed", f"[red]{report.failed_items}[/red]")
    console.print(table)

    for error in report.errors[:10]:
        console.print(f"  [red]•[/red] {error}")
