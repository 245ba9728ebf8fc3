"""Tests for folder lookup and creation."""

from unittest.mock import patch

import pytest

from mtp_music_sync.core.errors import InvalidInputError, TransientError
from mtp_music_sync.core.folders import FolderNavigator
from mtp_music_sync.models import PARENT_ROOT


@pytest.fixture
def navigator(session):
    """Create a navigator over the test session."""
    return FolderNavigator(session)


class TestFind:
    """Tests for FolderNavigator.find."""

    def test_case_insensitive(self, navigator, storage_id, handles):
        """Test that lookups ignore letter case."""
        assert navigator.find(storage_id, PARENT_ROOT, "MUSIC") == (
            handles()["/Music"]
        )

    def test_files_ignored(self, navigator, storage_id, make_file, handles):
        """Test that a file with the wanted name is not returned."""
        make_file("Music/Artist", b"file")
        music = handles()["/Music"]

        assert navigator.find(storage_id, music, "Artist") is None


class TestFindOrCreate:
    """Tests for FolderNavigator.find_or_create."""

    def test_creates_upper_case(self, navigator, storage_id, storage_root, handles):
        """Test that new folders get an upper-case name."""
        music = handles()["/Music"]

        handle = navigator.find_or_create(storage_id, music, "Daft Punk")

        assert (storage_root / "Music" / "DAFT PUNK").is_dir()
        assert handle == handles()["/Music/DAFT PUNK"]

    def test_idempotent(self, navigator, storage_id, storage_root, handles):
        """Test that repeated calls return the same folder."""
        music = handles()["/Music"]

        first = navigator.find_or_create(storage_id, music, "Artist")
        second = navigator.find_or_create(storage_id, music, "artist")

        assert first == second
        assert [p.name for p in (storage_root / "Music").iterdir()] == ["ARTIST"]

    def test_existing_folder_not_recreated(self, navigator, session, storage_id):
        """Test that an existing folder is found without creating anything."""
        with patch.object(session, "set_object_info") as mock_create:
            navigator.ensure_music_folder(storage_id)

        mock_create.assert_not_called()

    def test_created_concurrently(self, navigator, session, storage_id, storage_root):
        """Test that a folder created by someone else is picked up."""
        music = navigator.ensure_music_folder(storage_id)

        def lose_race(*args, **kwargs):
            (storage_root / "Music" / "ARTIST").mkdir()
            raise TransientError("Object already exists")

        with patch.object(session, "set_object_info", side_effect=lose_race):
            handle = navigator.find_or_create(storage_id, music, "Artist")

        assert handle == navigator.find(storage_id, music, "ARTIST")

    def test_creation_error_raised(self, navigator, session, storage_id):
        """Test that the creation error surfaces when the folder is absent."""
        music = navigator.ensure_music_folder(storage_id)

        with patch.object(
            session, "set_object_info", side_effect=TransientError("Storage full")
        ):
            with pytest.raises(TransientError, match="Storage full"):
                navigator.find_or_create(storage_id, music, "Artist")

    def test_unexpected_error_propagates(self, navigator, session, storage_id):
        """Test that errors outside the device taxonomy are not wrapped."""
        music = navigator.ensure_music_folder(storage_id)

        with patch.object(session, "set_object_info", side_effect=OSError("I/O")):
            with pytest.raises(OSError, match="I/O"):
                navigator.find_or_create(storage_id, music, "Artist")

        assert navigator.find(storage_id, music, "ARTIST") is None

    def test_empty_name(self, navigator, storage_id):
        """Test that blank names are rejected."""
        with pytest.raises(InvalidInputError):
            navigator.find_or_create(storage_id, PARENT_ROOT, "  ")


class TestEnsurePath:
    """Tests for nested folder creation."""

    def test_nested(self, navigator, storage_id, storage_root):
        """Test creating artist and album below the music folder."""
        music = navigator.ensure_music_folder(storage_id)

        navigator.ensure_path(storage_id, music, ["Artist", "Album"])

        assert (storage_root / "Music" / "ARTIST" / "ALBUM").is_dir()

    def test_music_folder_created(self, session, storage_id, storage_root):
        """Test creating a missing music folder."""
        (storage_root / "Music").rmdir()
        navigator = FolderNavigator(session)

        navigator.ensure_music_folder(storage_id)

        assert (storage_root / "MUSIC").is_dir()
