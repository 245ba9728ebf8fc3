"""Tests for uploads to the device."""

import logging
from unittest.mock import Mock, patch

import pytest

from mtp_music_sync.core.errors import (
    InvalidInputError,
    RetryExhaustedError,
    TooLargeError,
    TransientError,
)
from mtp_music_sync.core.transfer import MAX_UPLOAD_BYTES, Uploader
from mtp_music_sync.core.transport import DeviceSession
from mtp_music_sync.models import FormatCode, TransferJob, TransferOutcome


@pytest.fixture
def uploader(session):
    """Create an uploader without retry delays."""
    return Uploader(session, metadata_retry_delay=0, send_retry_delay=0)


@pytest.fixture
def music(handles):
    """Handle of the music folder."""
    return handles()["/Music"]


class FlakySend:
    """Wrap send_object_bytes so that selected calls fail."""

    def __init__(self, real_send, fail_when):
        self.real_send = real_send
        self.fail_when = fail_when
        self.sizes = []

    def __call__(self, handle, data, size):
        self.sizes.append(size)
        if self.fail_when(len(self.sizes), size):
            raise TransientError("Transfer interrupted", handle=handle)
        self.real_send(handle, data, size)


class TestUpload:
    """Tests for Uploader.upload."""

    def test_upload_bytes(self, uploader, storage_id, storage_root, music):
        """Test a clean upload with verification."""
        result = uploader.upload_bytes(storage_id, music, "A.MP3", b"abc" * 10)

        assert result.outcome == TransferOutcome.SUCCESS
        assert result.bytes_sent == 30
        assert result.verified
        assert (storage_root / "Music" / "A.MP3").read_bytes() == b"abc" * 10

    def test_upload_from_file(
        self, uploader, storage_id, storage_root, music, tmp_path
    ):
        """Test uploading a local file."""
        source = tmp_path / "song.mp3"
        source.write_bytes(b"\xff\xfb" * 50)

        result = uploader.upload(
            storage_id,
            TransferJob(
                source_file=source,
                target_parent_handle=music,
                target_filename="SONG.MP3",
                format_code=FormatCode.AUDIO,
            ),
        )

        assert result.verified
        assert (storage_root / "Music" / "SONG.MP3").stat().st_size == 100

    def test_too_large_rejected_before_transport(self):
        """Test that oversized payloads never reach the device."""
        session = Mock(spec=DeviceSession)
        uploader = Uploader(session)

        with pytest.raises(TooLargeError):
            uploader.upload_bytes(1, 2, "BIG.MP3", b"\x00" * (MAX_UPLOAD_BYTES + 1))

        assert session.method_calls == []

    def test_limit_is_inclusive(self):
        """Test that a payload of exactly the limit is accepted."""
        uploader = Uploader(Mock(spec=DeviceSession))
        uploader.check_size(MAX_UPLOAD_BYTES)

    def test_missing_filename(self, uploader, storage_id, music):
        """Test that a blank target name is rejected."""
        with pytest.raises(InvalidInputError):
            uploader.upload_bytes(storage_id, music, "  ", b"abc")

    def test_immediate_retry(self, uploader, session, storage_id, storage_root, music):
        """Test that a failed send is repeated and then succeeds."""
        flaky = FlakySend(session.send_object_bytes, lambda call, size: call == 1)

        with patch.object(session, "send_object_bytes", side_effect=flaky):
            result = uploader.upload_bytes(storage_id, music, "A.MP3", b"abc")

        assert flaky.sizes == [3, 3]
        assert result.outcome == TransferOutcome.SUCCESS
        assert (storage_root / "Music" / "A.MP3").read_bytes() == b"abc"

    def test_metadata_retried(self, uploader, session, storage_id, music):
        """Test that metadata registration is retried."""
        real_register = session.set_object_info
        calls = []

        def flaky_register(*args):
            calls.append(args)
            if len(calls) < 3:
                raise TransientError("Device busy")
            return real_register(*args)

        with patch.object(session, "set_object_info", side_effect=flaky_register):
            result = uploader.upload_bytes(storage_id, music, "A.MP3", b"abc")

        assert len(calls) == 3
        assert result.verified

    def test_metadata_exhausted(self, uploader, session, storage_id, music):
        """Test that registration failures stop the upload."""
        with patch.object(
            session, "set_object_info", side_effect=TransientError("Device busy")
        ):
            with patch.object(session, "send_object_bytes") as mock_send:
                with pytest.raises(RetryExhaustedError):
                    uploader.upload_bytes(storage_id, music, "A.MP3", b"abc")

        mock_send.assert_not_called()

    def test_partial_transfer(self, session, storage_id, storage_root, music):
        """Test the truncated last-resort send for large payloads."""
        uploader = Uploader(
            session,
            partial_transfer_bytes=1024,
            metadata_retry_delay=0,
            send_retry_delay=0,
        )
        flaky = FlakySend(session.send_object_bytes, lambda call, size: size > 1024)

        with patch.object(session, "send_object_bytes", side_effect=flaky):
            result = uploader.upload_bytes(storage_id, music, "A.MP3", b"x" * 4096)

        assert flaky.sizes == [4096, 4096, 4096, 1024]
        assert result.outcome == TransferOutcome.DEGRADED
        assert result.is_partial
        assert result.bytes_sent == 1024
        assert not result.verified
        assert (storage_root / "Music" / "A.MP3").stat().st_size == 1024

    def test_small_payload_has_no_partial_fallback(
        self, uploader, session, storage_id, music
    ):
        """Test that small payloads fail after three sends."""
        flaky = FlakySend(session.send_object_bytes, lambda call, size: True)

        with patch.object(session, "send_object_bytes", side_effect=flaky):
            with pytest.raises(RetryExhaustedError):
                uploader.upload_bytes(storage_id, music, "A.MP3", b"abc")

        assert flaky.sizes == [3, 3, 3]

    def test_size_mismatch_only_logged(
        self, uploader, session, storage_id, music, caplog
    ):
        """Test that a short object on the device is reported, not raised."""
        real_send = session.send_object_bytes

        def short_send(handle, data, size):
            real_send(handle, data[:2], 2)

        with patch.object(session, "send_object_bytes", side_effect=short_send):
            with caplog.at_level(logging.WARNING):
                result = uploader.upload_bytes(storage_id, music, "A.MP3", b"abcdef")

        assert result.outcome == TransferOutcome.SUCCESS
        assert not result.verified
        assert "Size mismatch" in caplog.text

    def test_verify_falls_back_to_parent(self, uploader, session, storage_id, music):
        """Test verification through the parent listing."""
        real_info = session.get_object_info
        uploaded = {}
        failures = []

        def info(handle):
            if handle == uploaded.get("handle") and not failures:
                failures.append(handle)
                raise TransientError("Device busy")
            return real_info(handle)

        real_register = session.set_object_info

        def register(*args):
            uploaded["handle"] = real_register(*args)
            return uploaded["handle"]

        with patch.object(session, "set_object_info", side_effect=register):
            with patch.object(session, "get_object_info", side_effect=info):
                result = uploader.upload_bytes(storage_id, music, "A.MP3", b"abc")

        assert result.verified
