"""
Provides methods for checking the integrity of extracted media files.
"""

import logging
from collections.abc import Callable
from pathlib import Path

from mutagen import MutagenError
from mutagen.aac import AAC
from mutagen.flac import FLAC
from mutagen.mp4 import MP4
from rich.markup import escape

log = logging.getLogger(__name__)


class FileIntegrityChecker:
    """A collection of static methods for validating extracted audio files."""

    @staticmethod
    def _check_stream(loader: Callable, filepath: Path, kind: str) -> bool:
        try:
            audio = loader(filepath)
        except MutagenError as e:
            log.warning(
                f"{kind} integrity check failed for "
                f"'{escape(str(filepath))}': {escape(str(e))}"
            )
            return False
        # A valid file should have stream info with a positive duration
        if audio.info and audio.info.length > 0:
            return True
        log.warning(
            f"{kind} integrity check failed for '{escape(str(filepath))}': "
            "No valid stream info."
        )
        return False

    @staticmethod
    def check_flac(filepath: Path) -> bool:
        """Checks that a FLAC file has a readable header and positive length."""
        return FileIntegrityChecker._check_stream(FLAC, filepath, "FLAC")

    @staticmethod
    def check_m4a(filepath: Path) -> bool:
        """Checks that an MP4/M4A container holds a readable audio stream."""
        return FileIntegrityChecker._check_stream(MP4, filepath, "M4A")

    @staticmethod
    def check_aac(filepath: Path) -> bool:
        """Checks that a raw ADTS/ADIF AAC stream can be parsed."""
        return FileIntegrityChecker._check_stream(AAC, filepath, "AAC")

    @classmethod
    def check_file(cls, filepath: Path) -> bool | None:
        """
        Dispatches on the file suffix.

        Returns:
            True/False for audio files, None for anything that is not audio
            (cover art, liner notes) and therefore not checked.
        """
        checks = {
            ".flac": cls.check_flac,
            ".m4a": cls.check_m4a,
            ".aac": cls.check_aac,
        }
        check = checks.get(filepath.suffix.lower())
        return check(filepath) if check else None

    @classmethod
    def find_corrupt_files(cls, directory: Path) -> list[Path]:
        """Returns every audio file below `directory` that fails its check."""
        return [
            path
            for path in sorted(directory.rglob("*"))
            if path.is_file() and cls.check_file(path) is False
        ]
