"""Command-line interface for the MTP music sync application.

This is the main entry point that delegates to command modules.
"""

from pathlib import Path
from typing import Any, Optional

import click

from ..utils.logging_config import configure_third_party_loggers, setup_logging
from .commands import (
    SyncApp,
    create_playlist_command,
    delete_folder_command,
    delete_playlist_command,
    delete_song_command,
    playlists_command,
    scan_command,
    show_command,
    songs_command,
    upload_command,
)


@click.group()
@click.option(
    "--log-level",
    default="WARNING",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    help="Set logging level",
)
@click.option("--log-file", type=click.Path(), help="Log to file")
@click.option(
    "--mount-point",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory the device is mounted on",
)
@click.option("--timeout", type=float, help="Seconds to wait for the device")
@click.option(
    "--storage",
    type=click.IntRange(min=1),
    help="Storage number to use when the device has several",
)
@click.option("--yes", "-y", is_flag=True, help="Answer yes to ordinary questions")
@click.pass_context
def cli(
    ctx: Any,
    log_level: str,
    log_file: Optional[str],
    mount_point: Optional[Path],
    timeout: Optional[float],
    storage: Optional[int],
    yes: bool,
) -> None:
    """MTP Music Sync.

    Copy music and playlists onto MTP media players and manage them.
    """
    setup_logging(log_level=log_level, log_file=Path(log_file) if log_file else None)
    configure_third_party_loggers()

    config_override: dict[str, Any] = {}
    if mount_point is not None:
        config_override["mount_point"] = mount_point.expanduser()
    if timeout is not None:
        config_override["connect_timeout"] = timeout

    app = SyncApp(config_override)
    app.assume_yes = yes
    if storage is not None:
        app.storage_index = storage - 1
    ctx.obj = app


# Register commands
cli.add_command(scan_command)
cli.add_command(songs_command)
cli.add_command(playlists_command)
cli.add_command(show_command)
cli.add_command(upload_command)
cli.add_command(create_playlist_command)
cli.add_command(delete_playlist_command)
cli.add_command(delete_song_command)
cli.add_command(delete_folder_command)


if __name__ == "__main__":
    cli()
