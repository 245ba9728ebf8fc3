"""Configuration management for the MTP music sync application."""

import os
from pathlib import Path
from typing import Tuple

from dotenv import load_dotenv

# Load .env file from config directory or project root
config_env = Path(__file__).parent.parent.parent / "config" / ".env"
if config_env.exists():
    load_dotenv(config_env)
else:
    load_dotenv()


def _split_list(value: str) -> Tuple[str, ...]:
    return tuple(part.strip() for part in value.split(",") if part.strip())


class Config:
    """Application configuration."""

    def __init__(self) -> None:
        """Initialize configuration from environment variables."""
        # Device settings
        self.mount_point = Path(
            os.getenv("MTP_SYNC_MOUNT_POINT", str(Path.home() / "mtp"))
        ).expanduser()
        self.connect_timeout = float(os.getenv("MTP_SYNC_CONNECT_TIMEOUT", "30"))

        # Library layout
        self.music_folder = os.getenv("MTP_SYNC_MUSIC_FOLDER", "Music")
        self.catalog_roots = _split_list(
            os.getenv("MTP_SYNC_CATALOG_ROOTS", f"/{self.music_folder}")
        )
        self.audio_extensions = (".mp3",)
        self.playlist_extensions = (".m3u", ".m3u8", ".pls")

        # Transfer settings
        self.max_upload_bytes = int(
            os.getenv("MTP_SYNC_MAX_UPLOAD_BYTES", str(10 * 1024 * 1024))
        )
        self.partial_transfer_bytes = 1024 * 1024
        self.metadata_attempts = 3
        self.metadata_retry_delay = 1.0
        self.send_retry_delay = 2.0
        self.delete_attempts = 3
        self.delete_retry_delay = 0.5
        self.info_attempts = 3
        self.info_retry_delay = 0.1

        # Playlist settings
        self.playlist_path_style = int(os.getenv("MTP_SYNC_PLAYLIST_PATH_STYLE", "1"))

        # Name matching settings
        self.fuzzy_match_threshold = int(
            os.getenv("MTP_SYNC_FUZZY_MATCH_THRESHOLD", "80")
        )

        # Logging
        self.log_directory = Path(
            os.getenv(
                "MTP_SYNC_LOG_DIRECTORY",
                str(Path.home() / ".mtp-music-sync" / "logs"),
            )
        ).expanduser()

    @property
    def log_file(self) -> Path:
        """Default log file location."""
        return self.log_directory / "mtp-music-sync.log"


def get_config() -> Config:
    """Get application configuration."""
    return Config()
