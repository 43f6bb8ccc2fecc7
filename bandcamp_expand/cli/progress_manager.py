"""
Manages a Rich progress display for a batch of archives being expanded
concurrently.
"""

import threading

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

from bandcamp_expand.models.record import ArchiveResult, ArchiveState


class ProgressManager:
    """
    Shows overall archive progress with running completed/failed counters.
    `on_result` is safe to call from worker threads.
    """

    def __init__(self, console: Console, dry_run: bool = False):
        self.console = console
        self.dry_run = dry_run
        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(bar_width=40),
            MofNCompleteColumn(),
            "•",
            TextColumn("[green]{task.fields[completed_ok]} ok[/green]"),
            TextColumn("[red]{task.fields[failed]} failed[/red]"),
            "•",
            TimeElapsedColumn(),
            console=console,
            transient=False,
        )
        self._task_id: TaskID | None = None
        self._counts = {"completed_ok": 0, "failed": 0}
        self._lock = threading.Lock()

    def __enter__(self) -> "ProgressManager":
        self.progress.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.progress.stop()
        return False

    def initialize_session(self, total_archives: int) -> None:
        description = "Planning" if self.dry_run else "Expanding"
        self._task_id = self.progress.add_task(
            f"[bold blue]{description} archives",
            total=total_archives,
            completed_ok=0,
            failed=0,
        )

    def on_result(self, result: ArchiveResult) -> None:
        """Advances the bar for one finished archive."""
        if self._task_id is None:
            return
        with self._lock:
            if result.state is ArchiveState.FAILED:
                self._counts["failed"] += 1
            else:
                self._counts["completed_ok"] += 1
            self.progress.update(self._task_id, advance=1, **self._counts)
