"""Tests for configuration from environment variables."""

from pathlib import Path

import pytest

from mtp_music_sync.config import Config, get_config

ENV_VARS = [
    "MTP_SYNC_MOUNT_POINT",
    "MTP_SYNC_CONNECT_TIMEOUT",
    "MTP_SYNC_MUSIC_FOLDER",
    "MTP_SYNC_CATALOG_ROOTS",
    "MTP_SYNC_MAX_UPLOAD_BYTES",
    "MTP_SYNC_PLAYLIST_PATH_STYLE",
    "MTP_SYNC_FUZZY_MATCH_THRESHOLD",
    "MTP_SYNC_LOG_DIRECTORY",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove configuration variables set outside the test."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestConfig:
    """Test configuration management."""

    def test_defaults(self):
        """Test that config can be created with defaults."""
        config = get_config()

        assert config.mount_point == Path.home() / "mtp"
        assert config.connect_timeout == 30
        assert config.music_folder == "Music"
        assert config.catalog_roots == ("/Music",)
        assert config.max_upload_bytes == 10 * 1024 * 1024
        assert config.partial_transfer_bytes == 1024 * 1024
        assert config.delete_attempts == 3
        assert config.playlist_path_style == 1
        assert config.fuzzy_match_threshold == 80
        assert config.log_file.name == "mtp-music-sync.log"

    def test_environment_overrides(self, monkeypatch, tmp_path):
        """Test values read from MTP_SYNC_ variables."""
        monkeypatch.setenv("MTP_SYNC_MOUNT_POINT", str(tmp_path))
        monkeypatch.setenv("MTP_SYNC_CONNECT_TIMEOUT", "5")
        monkeypatch.setenv("MTP_SYNC_PLAYLIST_PATH_STYLE", "3")
        monkeypatch.setenv("MTP_SYNC_LOG_DIRECTORY", str(tmp_path / "logs"))

        config = Config()

        assert config.mount_point == tmp_path
        assert config.connect_timeout == 5.0
        assert config.playlist_path_style == 3
        assert config.log_file == tmp_path / "logs" / "mtp-music-sync.log"

    def test_catalog_roots_list(self, monkeypatch):
        """Test comma separated catalog roots."""
        monkeypatch.setenv("MTP_SYNC_CATALOG_ROOTS", "/Music, /Podcasts,,")

        assert Config().catalog_roots == ("/Music", "/Podcasts")

    def test_catalog_roots_follow_music_folder(self, monkeypatch):
        """Test that the default catalog root is the music folder."""
        monkeypatch.setenv("MTP_SYNC_MUSIC_FOLDER", "Songs")

        assert Config().catalog_roots == ("/Songs",)
