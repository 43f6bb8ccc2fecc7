"""
The main orchestrator for discovering archives and running them through the
pipeline concurrently.
"""

import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path

from rich.markup import escape

from bandcamp_expand.models.config import ExpandConfig
from bandcamp_expand.models.record import ArchiveResult, ArchiveState
from bandcamp_expand.models.stats import BatchStats
from bandcamp_expand.utils.structured_logger import (
    SessionLogger,
    create_structured_logger,
)

from .archive_processor import ArchiveProcessor

log = logging.getLogger(__name__)


def discover_archives(source_dir: Path, extension: str = ".zip") -> list[Path]:
    """
    Lists archive files directly under `source_dir` (not recursive).

    The extension match ignores case, e.g. both 'a.zip' and 'b.ZIP' qualify.
    """
    extension = extension.lower()
    return sorted(
        path
        for path in source_dir.iterdir()
        if path.is_file() and path.suffix.lower() == extension
    )


class BatchManager:
    """Orchestrates the entire expansion run."""

    def __init__(
        self,
        config: ExpandConfig,
        processor: ArchiveProcessor | None = None,
        session_logger: SessionLogger | None = None,
        on_result: Callable[[ArchiveResult], None] | None = None,
    ):
        self.config = config
        self.processor = processor or ArchiveProcessor(config)
        self.stats = BatchStats(dry_run=config.dry_run)
        self.on_result = on_result
        self._owns_events = session_logger is None
        if session_logger is None:
            _, session_logger = create_structured_logger(config.log_dir)
        self.events = session_logger

    def execute(self, archives: list[Path] | None = None) -> BatchStats:
        """
        Processes every discovered archive and returns the session statistics.

        A failing archive never stops the batch; it is recorded and left on disk.
        """
        if archives is None:
            archives = discover_archives(
                self.config.source_dir, self.config.archive_extension
            )
        self.stats.total_archives = len(archives)
        self.events.logger.set_session_context(
            source_dir=str(self.config.source_dir),
            library_dir=str(self.config.library_dir),
        )
        self.events.session_started(
            len(archives), self.config.max_workers, self.config.dry_run
        )

        try:
            if not archives:
                log.info(
                    "No archives found in "
                    f"[dim]{escape(str(self.config.source_dir))}[/dim]. Nothing to do."
                )
                return self.stats

            with ThreadPoolExecutor(
                max_workers=self.config.max_workers,
                thread_name_prefix="expand",
            ) as executor:
                future_to_path = {
                    executor.submit(self.processor.process, path): path
                    for path in archives
                }
                for future in as_completed(future_to_path):
                    self._record(future.result())

            self._report()
            return self.stats
        finally:
            self.events.session_completed(
                self.stats.duration_s, len(self.stats.completed), len(self.stats.failed)
            )
            if self._owns_events:
                self.events.logger.close()

    def _record(self, result: ArchiveResult) -> None:
        self.stats.record(result)
        if result.state is ArchiveState.COMPLETED:
            self.events.archive_completed(
                result.name,
                result.codec.value,
                result.artist,
                result.album,
                result.files_written,
            )
        elif result.state is ArchiveState.FAILED:
            stage = result.failed_stage.value if result.failed_stage else "unknown"
            self.events.archive_failed(result.name, stage, result.error or "")
        if self.on_result:
            self.on_result(result)

    def _report(self) -> None:
        """Logs every archive that made it all the way through."""
        log.info("")
        for name in self.stats.completed:
            log.info(f"[green]Successfully processed:[/green] {escape(name)}")
        for name, reason in self.stats.failed.items():
            log.warning(f"[yellow]Left in place:[/yellow] {escape(name)} ({reason})")
