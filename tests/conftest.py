"""Shared fixtures: a fake device mounted in a temporary directory."""

import logging
from pathlib import Path
from typing import Callable, Dict, List

import pytest

from mtp_music_sync.core.transfer import Confirmer
from mtp_music_sync.core.transport import DeviceSession, MountedDeviceTransport

STORAGE_NAME = "Internal Storage"


class ScriptedConfirmer(Confirmer):
    """Confirmer answering from a fixed list of replies."""

    def __init__(self, answers: List[bool], phrase: str = "") -> None:
        self.answers = list(answers)
        self.phrase = phrase
        self.questions: List[str] = []

    def confirm(self, message: str) -> bool:
        self.questions.append(message)
        return self.answers.pop(0) if self.answers else False

    def confirm_phrase(self, message: str, phrase: str = "") -> bool:
        self.questions.append(message)
        return self.phrase == phrase


@pytest.fixture
def quiet_logger() -> logging.Logger:
    """Logger that drops every record."""
    quiet = logging.getLogger("mtp_music_sync.tests.quiet")
    quiet.addHandler(logging.NullHandler())
    quiet.propagate = False
    return quiet


@pytest.fixture
def mount_point(tmp_path: Path) -> Path:
    """Create a mount point holding one storage with a Music folder."""
    (tmp_path / STORAGE_NAME / "Music").mkdir(parents=True)
    return tmp_path


@pytest.fixture
def storage_root(mount_point: Path) -> Path:
    """Directory backing the single storage."""
    return mount_point / STORAGE_NAME


@pytest.fixture
def make_file(storage_root: Path) -> Callable[..., Path]:
    """Create a file on the fake device."""

    def _make(relative: str, data: bytes = b"ID3" + b"\x00" * 61) -> Path:
        path = storage_root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return path

    return _make


@pytest.fixture
def transport(mount_point: Path) -> MountedDeviceTransport:
    """Transport over the fake mount point (not opened)."""
    return MountedDeviceTransport(mount_point)


@pytest.fixture
def session(transport: MountedDeviceTransport):
    """Open device session without retry delays."""
    device_session = DeviceSession(transport, info_retry_delay=0)
    device_session.open()
    yield device_session
    device_session.close()


@pytest.fixture
def storage_id(session: DeviceSession) -> int:
    """Id of the single storage."""
    return session.list_storages()[0].storage_id


@pytest.fixture
def handles(session: DeviceSession, storage_id: int) -> Callable[[], Dict[str, int]]:
    """Map device paths to handles by walking the whole storage."""

    def _handles() -> Dict[str, int]:
        return {
            entry.path: entry.handle for entry in session.walk(storage_id, "/")
        }

    return _handles


@pytest.fixture
def scripted_confirmer() -> Callable[..., ScriptedConfirmer]:
    """Factory for confirmers with scripted answers."""
    return ScriptedConfirmer
