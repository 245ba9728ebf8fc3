"""Application context shared by the CLI commands."""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional, Tuple

import click
from rich.console import Console

from ...config import Config, get_config
from ...core.errors import DeviceSyncError, is_device_busy
from ...core.transport import DeviceSession, MountedDeviceTransport
from ...models import Storage
from ...services import LibraryService
from ..display import ClickConfirmer, choose_from_list, display_storages

console = Console()
logger = logging.getLogger(__name__)


class SyncApp:
    """Holds configuration and opens device sessions for commands."""

    def __init__(self, config_override: Optional[Dict[str, Any]] = None) -> None:
        """Initialize application.

        Args:
            config_override: Optional configuration overrides
        """
        self.config: Config = get_config()
        if config_override:
            for key, value in config_override.items():
                setattr(self.config, key, value)
        self.assume_yes = False
        self.storage_index: Optional[int] = None

    def open_session(self) -> DeviceSession:
        """Connect to the device.

        Raises:
            click.ClickException: If the device cannot be reached
        """
        transport = MountedDeviceTransport(self.config.mount_point)
        session = DeviceSession(
            transport,
            info_attempts=self.config.info_attempts,
            info_retry_delay=self.config.info_retry_delay,
        )
        try:
            with console.status("[bold green]Connecting to device..."):
                session.connect(self.config.connect_timeout)
        except DeviceSyncError as e:
            logger.error("Connection failed: %s", e)
            if is_device_busy(e):
                console.print(
                    "[yellow]The device seems to be in use by another program. "
                    "Close file managers or media apps that access it and try "
                    "again.[/yellow]"
                )
            raise click.ClickException(f"Could not connect to device: {e}")
        return session

    @contextmanager
    def library(
        self, storage_index: Optional[int] = None
    ) -> Iterator[Tuple[LibraryService, Storage]]:
        """Open a session and yield the library service with a storage.

        Args:
            storage_index: Zero-based storage index; defaults to the one
                chosen on the command line and is asked for when the device
                has several storages
        """
        if storage_index is None:
            storage_index = self.storage_index
        session = self.open_session()
        try:
            service = LibraryService(
                session, self.config, confirmer=ClickConfirmer(self.assume_yes)
            )
            storages = service.storages()
            if storage_index is None and len(storages) > 1:
                display_storages(storages)
                storage = choose_from_list(storages, "Select storage")
            else:
                storage = service.select_storage(storage_index)
            logger.debug("Using storage %#x", storage.storage_id)
            yield service, storage
        finally:
            session.close()
