"""Tests for logical path handling and name sanitizing."""

import pytest

from mtp_music_sync.core.paths import (
    base_name,
    normalize_logical_path,
    parent_segment,
    path_variations,
    sanitize_file_name,
    sanitize_folder_name,
    strip_numeric_prefix,
)


class TestNormalizeLogicalPath:
    """Tests for normalize_logical_path."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("0:/Music/Artist/Song.mp3", "/MUSIC/ARTIST/SONG.MP3"),
            ("0:Music/Song.mp3", "/MUSIC/SONG.MP3"),
            ("file:///Music/Song.mp3", "/MUSIC/SONG.MP3"),
            ("music//artist///song.mp3", "/MUSIC/ARTIST/SONG.MP3"),
            ("/Music/Artist/", "/MUSIC/ARTIST"),
            ("  /Music/Song.mp3  ", "/MUSIC/SONG.MP3"),
            ("Music\\Artist\\Song.mp3", "/MUSIC/ARTIST/SONG.MP3"),
            ("/", "/"),
            ("", "/"),
        ],
    )
    def test_normalize(self, raw, expected):
        """Test the canonical upper-case form."""
        assert normalize_logical_path(raw) == expected

    def test_preserve_case(self):
        """Test that upper=False keeps the letter case."""
        assert normalize_logical_path("0:/Music/Song.mp3", upper=False) == (
            "/Music/Song.mp3"
        )


class TestPathVariations:
    """Tests for path_variations."""

    def test_order_and_content(self):
        """Test that the raw path comes first and all spellings are present."""
        variations = path_variations("/Music/Song.mp3")

        assert variations[0] == "/Music/Song.mp3"
        assert "Music/Song.mp3" in variations
        assert "0:/Music/Song.mp3" in variations
        assert "0:Music/Song.mp3" in variations
        assert "/MUSIC/SONG.MP3" in variations
        assert "0:/MUSIC/SONG.MP3" in variations
        assert "music/song.mp3" in variations

    def test_no_duplicates(self):
        """Test that every variation is listed once."""
        variations = path_variations("/MUSIC/SONG.MP3")
        assert len(variations) == len(set(variations))

    def test_drive_prefix_input(self):
        """Test expanding a path that already carries the drive prefix."""
        variations = path_variations("0:/MUSIC/SONG.MP3")

        assert variations[0] == "0:/MUSIC/SONG.MP3"
        assert "/MUSIC/SONG.MP3" in variations
        assert "MUSIC/SONG.MP3" in variations


class TestNameHelpers:
    """Tests for track-number stripping and name comparison helpers."""

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("01 Track.mp3", "Track.mp3"),
            ("01_Track.mp3", "Track.mp3"),
            ("01 - Track.mp3", "Track.mp3"),
            ("7. Track", "Track"),
            ("1999", "1999"),
            ("2Pac - Changes", "2Pac - Changes"),
            ("Track", "Track"),
        ],
    )
    def test_strip_numeric_prefix(self, name, expected):
        """Test removing leading track numbers."""
        assert strip_numeric_prefix(name) == expected

    def test_base_name(self):
        """Test base name without number and extension."""
        assert base_name("/MUSIC/ARTIST/ALBUM/01 Track.mp3") == "TRACK"
        assert base_name("/MUSIC/ARTIST/ALBUM/Track") == "TRACK"

    def test_parent_segment(self):
        """Test the containing folder name."""
        assert parent_segment("/MUSIC/ARTIST/ALBUM/01 Track.mp3") == "album"
        assert parent_segment("Track.mp3") == ""


class TestSanitize:
    """Tests for folder and file name sanitizing."""

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("Daft Punk", "Daft_Punk"),
            ("AC/DC", "AC_DC"),
            ("Guns N' Roses", "Guns_N'_Roses"),
            ("Björk", "Bj_rk"),
            ("  spaced   out  ", "spaced_out"),
            ("", "unnamed"),
            ("???", "unnamed"),
        ],
    )
    def test_sanitize_folder_name(self, name, expected):
        """Test device-safe folder names."""
        assert sanitize_folder_name(name) == expected

    def test_sanitize_folder_name_length(self):
        """Test that folder names are cut to 64 characters."""
        assert len(sanitize_folder_name("a" * 100)) == 64

    def test_sanitize_file_name_keeps_extension(self):
        """Test that the extension survives sanitizing."""
        assert sanitize_file_name("One More Time.mp3") == "One_More_Time.mp3"

    def test_sanitize_file_name_length(self):
        """Test that long file names are cut but keep the extension."""
        result = sanitize_file_name("a" * 100 + ".mp3")

        assert len(result) == 64
        assert result.endswith(".mp3")

    def test_sanitize_file_name_empty(self):
        """Test the fallback name."""
        assert sanitize_file_name("???.mp3") == "unnamed.mp3"
