"""Tests for the command-line interface."""

import logging

import pytest
from click.testing import CliRunner

from mtp_music_sync.cli.display.prompts import _parse_selection
from mtp_music_sync.cli.main import cli


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Undo the handler changes made by setup_logging."""
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    level = root_logger.level
    yield
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)


@pytest.fixture
def runner():
    """Create a CLI runner."""
    return CliRunner()


@pytest.fixture
def run(runner, mount_point):
    """Invoke the CLI against the fake device."""

    def _run(*args, input=None):
        return runner.invoke(
            cli,
            ["--mount-point", str(mount_point), "--timeout", "5", *args],
            input=input,
        )

    return _run


class TestCommands:
    """Tests for the CLI commands."""

    def test_help_lists_commands(self, runner):
        """Test that every command is registered."""
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        for command in (
            "scan",
            "songs",
            "playlists",
            "show",
            "upload",
            "create-playlist",
            "delete-playlist",
            "delete-song",
            "delete-folder",
        ):
            assert command in result.output

    def test_scan(self, run, make_file):
        """Test the device summary."""
        make_file("Music/A/B/a.mp3")

        result = run("scan")

        assert result.exit_code == 0
        assert "Device found" in result.output
        assert "Internal Storage" in result.output

    def test_not_mounted(self, runner, tmp_path):
        """Test the error for a missing device."""
        result = runner.invoke(cli, ["--mount-point", str(tmp_path / "gone"), "scan"])

        assert result.exit_code != 0
        assert "Could not connect to device" in result.output

    def test_songs(self, run, make_file):
        """Test listing songs."""
        make_file("Music/A/B/a.mp3")

        result = run("songs")

        assert result.exit_code == 0
        assert "1 song(s)" in result.output

    def test_upload_file(self, run, storage_root, tmp_path_factory):
        """Test uploading a file without tags."""
        source = tmp_path_factory.mktemp("sources") / "track.mp3"
        source.write_bytes(b"\x00" * 32)

        result = run("--yes", "upload", str(source))

        assert result.exit_code == 0
        stored = storage_root / "Music" / "UNKNOWN_ARTIST" / "UNKNOWN_ALBUM"
        assert (stored / "TRACK.MP3").exists()

    def test_create_playlist(self, run, make_file, storage_root):
        """Test creating a playlist from a selection."""
        make_file("Music/A/B/a.mp3")
        make_file("Music/A/B/b.mp3")

        result = run("create-playlist", "Mix", input="1-2\n")

        assert result.exit_code == 0
        text = (storage_root / "Music" / "MIX.M3U8").read_text()
        assert "0:/MUSIC/A/B/A.MP3" in text
        assert "0:/MUSIC/A/B/B.MP3" in text

    def test_delete_music_root_refused(self, run, make_file):
        """Test that a wrong phrase keeps the music folder."""
        track = make_file("Music/A/B/a.mp3")

        result = run("--yes", "delete-folder", "--music-root", input="yes\n")

        assert result.exit_code != 0
        assert "Refused" in result.output
        assert track.exists()

    def test_delete_folder(self, run, make_file, storage_root):
        """Test deleting an artist folder by name."""
        make_file("Music/A/B/a.mp3")

        result = run("--yes", "delete-folder", "A")

        assert result.exit_code == 0
        assert not (storage_root / "Music" / "A").exists()

    def test_delete_playlist_cancelled(self, run, make_file):
        """Test declining a playlist deletion."""
        playlist = make_file("Music/MIX.M3U8", b"#EXTM3U\n")

        result = run("delete-playlist", "MIX", input="n\n")

        assert result.exit_code == 0
        assert "cancelled" in result.output
        assert playlist.exists()


class TestParseSelection:
    """Tests for selection parsing."""

    def test_ranges_and_numbers(self):
        """Test mixed numbers and ranges without duplicates."""
        assert _parse_selection("1,3,5-7,3", 10) == [1, 3, 5, 6, 7]

    @pytest.mark.parametrize("answer", ["0", "11", "2-12", "", "x"])
    def test_invalid(self, answer):
        """Test rejected selections."""
        with pytest.raises(ValueError):
            _parse_selection(answer, 10)
