"""
Peeks inside an archive to work out which kind of audio it carries.
"""

import logging
import zipfile
from pathlib import Path

from rich.markup import escape

from bandcamp_expand.exceptions import ArchiveReadError
from bandcamp_expand.models.record import CodecKind

log = logging.getLogger(__name__)

CODEC_SUFFIXES = {
    ".flac": CodecKind.FLAC,
    ".aac": CodecKind.AAC,
    ".m4a": CodecKind.AAC,
}


class ArchiveInspector:
    """
    Classifies archives by the suffix of their audio entries.

    An archive is assumed to never mix FLAC and AAC files. If one does, the
    first matching entry in archive order decides.
    """

    def __init__(self, logger: logging.Logger | logging.LoggerAdapter | None = None):
        self.log = logger or log

    @staticmethod
    def classify_name(entry_name: str) -> CodecKind:
        """Returns the codec implied by a single entry name."""
        lowered = entry_name.lower()
        for suffix, codec in CODEC_SUFFIXES.items():
            if lowered.endswith(suffix):
                return codec
        return CodecKind.UNKNOWN

    def classify(self, archive: zipfile.ZipFile) -> CodecKind:
        """Returns the codec of the first audio entry, or UNKNOWN if there is none."""
        for info in archive.infolist():
            codec = self.classify_name(info.filename)
            if codec is not CodecKind.UNKNOWN:
                self.log.debug(
                    f"Classified as {codec.value} from '{escape(info.filename)}'"
                )
                return codec
        return CodecKind.UNKNOWN

    def classify_file(self, archive_path: Path) -> CodecKind:
        """Opens the archive read-only, classifies it, and closes it again."""
        try:
            with zipfile.ZipFile(archive_path) as archive:
                return self.classify(archive)
        except (zipfile.BadZipFile, zipfile.LargeZipFile) as e:
            raise ArchiveReadError(f"Cannot read '{archive_path.name}': {e}") from e
