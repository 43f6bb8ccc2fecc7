import struct
import zipfile
from collections.abc import Callable
from pathlib import Path

import pytest

from bandcamp_expand.models.config import ExpandConfig


def write_zip(path: Path, entries: dict[str, bytes]) -> Path:
    """Writes a deflate zip with the given entry names and contents, in order."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for name, data in entries.items():
            archive.writestr(name, data)
    return path


def flac_bytes(seconds: int = 1, sample_rate: int = 44100) -> bytes:
    """
    Builds the smallest file mutagen accepts as FLAC: the "fLaC" marker and a
    single (last) STREAMINFO block for 16-bit stereo, with no audio frames.
    """
    channels, bits_per_sample = 2, 16
    total_samples = seconds * sample_rate
    packed = (
        (sample_rate << 44)
        | ((channels - 1) << 41)
        | ((bits_per_sample - 1) << 36)
        | total_samples
    )
    streaminfo = (
        struct.pack(">HH", 4096, 4096)  # min/max block size
        + bytes(6)  # min/max frame size, unknown
        + struct.pack(">Q", packed)
        + bytes(16)  # MD5 of the decoded audio, unset
    )
    header = bytes([0x80]) + len(streaminfo).to_bytes(3, "big")
    return b"fLaC" + header + streaminfo


@pytest.fixture
def make_flac() -> Callable[..., bytes]:
    return flac_bytes


@pytest.fixture
def valid_flac() -> bytes:
    return flac_bytes()


@pytest.fixture
def make_zip() -> Callable[[Path, dict[str, bytes]], Path]:
    return write_zip


@pytest.fixture
def source_dir(tmp_path: Path) -> Path:
    path = tmp_path / "Downloads" / "Bandcamp"
    path.mkdir(parents=True)
    return path


@pytest.fixture
def library_dir(tmp_path: Path) -> Path:
    return tmp_path / "Music"


@pytest.fixture
def make_config(source_dir: Path, library_dir: Path) -> Callable[..., ExpandConfig]:
    def _make(**overrides) -> ExpandConfig:
        settings = {
            "source_dir": source_dir,
            "library_dir": library_dir,
            "staging_dir": source_dir / "auto",
        }
        settings.update(overrides)
        return ExpandConfig(**settings)

    return _make
