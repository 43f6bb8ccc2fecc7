"""
Handles the processing of a single archive, from classification to cleanup.
"""

import logging
import shutil
import threading
from pathlib import Path

from rich.markup import escape

from bandcamp_expand.exceptions import (
    BandcampExpandError,
    FileIntegrityError,
    MalformedFilenameError,
    UnknownCodecError,
)
from bandcamp_expand.media import (
    ArchiveExtractor,
    ArchiveInspector,
    FileIntegrityChecker,
)
from bandcamp_expand.models.config import FAILED_SUBDIR, ExpandConfig
from bandcamp_expand.models.record import (
    ArchiveRecord,
    ArchiveResult,
    ArchiveState,
    CodecKind,
)
from bandcamp_expand.storage.library import TreeMerger
from bandcamp_expand.utils.filename import parse_filename
from bandcamp_expand.utils.path import create_dir, safe_component
from bandcamp_expand.utils.structured_logger import ArchiveLogger

log = logging.getLogger(__name__)


class ArchiveProcessor:
    """
    Runs the per-archive pipeline:
    classify -> parse name -> extract to staging -> merge into library ->
    remove staging -> delete the source archive.

    Any failure leaves the source archive and the staging files where they are.
    """

    def __init__(
        self,
        config: ExpandConfig,
        logger: logging.Logger | None = None,
    ):
        self.config = config
        self.log = logger or log
        self._staging_locks: dict[Path, threading.Lock] = {}
        self._staging_locks_main = threading.Lock()

    def _get_staging_lock(self, staging_artist_dir: Path) -> threading.Lock:
        """
        Gets or creates the lock guarding one staging artist directory.

        Two albums by the same artist share that directory, and it is removed
        wholesale after a merge.
        """
        with self._staging_locks_main:
            lock = self._staging_locks.get(staging_artist_dir)
            if lock is None:
                lock = self._staging_locks[staging_artist_dir] = threading.Lock()
            return lock

    def process(self, archive_path: Path) -> ArchiveResult:
        """
        Processes one archive end to end. Never raises; failures are returned
        as a FAILED result.
        """
        record = ArchiveRecord(source_path=archive_path)
        alog = ArchiveLogger(self.log, record.name)
        alog.info("Processing file")

        try:
            self._classify(record, alog)
            self._plan_destinations(record)

            if self.config.dry_run:
                alog.info(
                    f"[cyan]→ (Dry Run)[/] Would expand to "
                    f"[dim]{escape(str(record.library_album_dir))}[/dim]"
                )
                record.advance(ArchiveState.PLANNED)
                return ArchiveResult.from_record(record)

            with self._get_staging_lock(record.staging_artist_dir):
                try:
                    self._stage(record, alog)
                    self._merge(record, alog)
                except Exception:
                    self._set_aside(record, alog)
                    raise

            alog.debug(f"Deleting source archive {escape(str(archive_path))}")
            archive_path.unlink()
            record.advance(ArchiveState.COMPLETED)
            alog.info(
                f"[green]✓ Completed[/green] {record.files_written} files → "
                f"[dim]{escape(str(record.library_album_dir))}[/dim]"
            )
            return ArchiveResult.from_record(record)

        except BandcampExpandError as e:
            alog.error(
                f"[red]✗ Failed during {record.state.value}:[/red] {escape(str(e))}"
            )
            return ArchiveResult.failure(record, e)
        except Exception as e:
            alog.error(
                f"[red]✗ Unexpected error during {record.state.value}:[/red] "
                f"{escape(str(e))}",
                exc_info=alog.logger.getEffectiveLevel() == logging.DEBUG,
            )
            return ArchiveResult.failure(record, e)

    def _classify(self, record: ArchiveRecord, alog: ArchiveLogger) -> None:
        inspector = ArchiveInspector(logger=alog)
        codec = inspector.classify_file(record.source_path)
        if codec is CodecKind.UNKNOWN:
            raise UnknownCodecError(
                "Cannot find known file type inside compressed folder"
            )
        record.codec = codec
        record.advance(ArchiveState.CLASSIFIED)
        alog.info(f"Found {codec.value} files")

    def _plan_destinations(self, record: ArchiveRecord) -> None:
        record.artist, record.album = parse_filename(record.name)

        artist_dir = _directory_name(record.artist, "artist", record.name)
        album_dir = _directory_name(record.album, "album", record.name)
        codec_dir = record.codec.value
        record.staging_album_dir = (
            self.config.staging_dir / codec_dir / artist_dir / album_dir
        )
        record.library_album_dir = (
            self.config.library_dir / codec_dir / artist_dir / album_dir
        )

    def _stage(self, record: ArchiveRecord, alog: ArchiveLogger) -> None:
        alog.info(
            f"Creating temp directory: {escape(str(record.staging_album_dir))}"
        )
        extractor = ArchiveExtractor(self.config.label_prefixes, logger=alog)
        record.files_written = extractor.extract(
            record.source_path, record.staging_album_dir, record.artist, record.album
        )
        record.advance(ArchiveState.STAGED)

        if self.config.verify:
            corrupt = FileIntegrityChecker.find_corrupt_files(record.staging_album_dir)
            if corrupt:
                names = ", ".join(path.name for path in corrupt)
                raise FileIntegrityError(
                    f"Extracted audio failed verification: {names}"
                )

    def _merge(self, record: ArchiveRecord, alog: ArchiveLogger) -> None:
        staging_artist_dir = record.staging_artist_dir
        library_artist_dir = record.library_artist_dir
        alog.info(
            f"Moving {escape(str(staging_artist_dir))} to final location: "
            f"{escape(str(library_artist_dir))}"
        )
        summary = TreeMerger(logger=alog).merge(staging_artist_dir, library_artist_dir)
        alog.info(
            f"Merged: {summary.copied} copied, {summary.replaced} replaced, "
            f"{summary.skipped} already present"
        )
        record.advance(ArchiveState.MERGED)
        shutil.rmtree(staging_artist_dir)

    def _set_aside(self, record: ArchiveRecord, alog: ArchiveLogger) -> None:
        """
        Moves a failed album out of the shared staging artist directory into
        <staging>/failed/<codec>/<artist>/<album>. A later archive by the same
        artist merges that whole directory, so the rejected files must not
        stay in it.
        """
        album_dir = record.staging_album_dir
        if not album_dir.exists():
            return
        kept_dir = (
            self.config.staging_dir
            / FAILED_SUBDIR
            / album_dir.relative_to(self.config.staging_dir)
        )
        try:
            if kept_dir.exists():
                shutil.rmtree(kept_dir)
            create_dir(kept_dir.parent)
            shutil.move(album_dir, kept_dir)
            artist_dir = record.staging_artist_dir
            if not any(artist_dir.iterdir()):
                artist_dir.rmdir()
        except OSError as e:
            alog.error(
                f"Could not set aside staged files in "
                f"{escape(str(album_dir))}: {escape(str(e))}"
            )
            return
        alog.warning(
            f"[yellow]Staged files kept for inspection in[/yellow] "
            f"[dim]{escape(str(kept_dir))}[/dim]"
        )


def _directory_name(value: str, what: str, archive_name: str) -> str:
    """Turns a parsed artist/album into a single, non-traversing path component."""
    name = safe_component(value)
    if not name.strip() or name in (".", ".."):
        raise MalformedFilenameError(
            f"'{archive_name}' yields an unusable {what} name '{value}'."
        )
    return name
