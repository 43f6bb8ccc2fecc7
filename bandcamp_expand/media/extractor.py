"""
Extracts the members of a single archive into a staging directory.
"""

import logging
import shutil
import zipfile
from collections.abc import Iterable
from pathlib import Path

from rich.markup import escape

from bandcamp_expand.exceptions import ArchiveReadError, TraversalRejectedError
from bandcamp_expand.utils.path import (
    DEFAULT_LABEL_PREFIXES,
    create_dir,
    default_entry_prefixes,
    resolve_within,
    strip_prefixes,
)

log = logging.getLogger(__name__)

COPY_BUFFER_SIZE = 1024 * 1024  # 1 MB


class ArchiveExtractor:
    """
    Writes archive entries below a staging root.

    Entry names have the label/artist/album noise stripped first, and every
    resulting path is checked to stay inside the staging root. Entries whose
    destination already exists are skipped, so re-running after a partial
    extraction is safe.
    """

    def __init__(
        self,
        label_prefixes: Iterable[str] = DEFAULT_LABEL_PREFIXES,
        logger: logging.Logger | logging.LoggerAdapter | None = None,
    ):
        self.label_prefixes = tuple(label_prefixes)
        self.log = logger or log

    def extract(
        self, archive_path: Path, staging_root: Path, artist: str, album: str
    ) -> int:
        """
        Extracts `archive_path` into `staging_root`.

        Args:
            archive_path: The zip file to read.
            staging_root: Directory that receives the extracted files.
            artist: Artist name, stripped from entry names.
            album: Album name, stripped from entry names.

        Returns:
            The number of files written.

        Raises:
            ArchiveReadError: If the archive is not a readable zip file.
        """
        self.log.info(
            f"Expanding {escape(archive_path.name)} to {escape(str(staging_root))}"
        )
        prefixes = default_entry_prefixes(artist, album, self.label_prefixes)
        create_dir(staging_root)

        written = 0
        try:
            with zipfile.ZipFile(archive_path) as archive:
                for info in archive.infolist():
                    if self._extract_entry(archive, info, staging_root, prefixes):
                        written += 1
        except (zipfile.BadZipFile, zipfile.LargeZipFile) as e:
            raise ArchiveReadError(f"Cannot read '{archive_path.name}': {e}") from e
        return written

    def _extract_entry(
        self,
        archive: zipfile.ZipFile,
        info: zipfile.ZipInfo,
        staging_root: Path,
        prefixes: list[str],
    ) -> bool:
        """Extracts one entry. Returns True only when a file was written."""
        entry_name = strip_prefixes(info.filename, prefixes)
        try:
            destination = resolve_within(staging_root, entry_name)
        except TraversalRejectedError as e:
            self.log.debug(f"Ignoring entry: {escape(str(e))}")
            return False

        if info.is_dir():
            create_dir(destination)
            return False

        if destination.exists():
            self.log.warning(
                f"[yellow]○ Skipping (already exists)[/yellow] {escape(entry_name)}"
            )
            return False

        create_dir(destination.parent)
        self.log.debug(f"Writing {escape(str(destination))}")
        # A crash mid-entry must not leave a truncated file that a re-run
        # would then skip as "already exists".
        temp_path = destination.with_name(f"{destination.name}.part")
        try:
            with archive.open(info) as source, open(temp_path, "wb") as target:
                shutil.copyfileobj(source, target, COPY_BUFFER_SIZE)
            temp_path.replace(destination)
        finally:
            temp_path.unlink(missing_ok=True)
        return True
