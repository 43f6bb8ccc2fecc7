"""
Thread-safe collection of per-archive outcomes for a batch session.
"""

import threading
import time
from dataclasses import dataclass, field

from .record import ArchiveResult, ArchiveState


@dataclass
class BatchStats:
    """Tracks archive outcomes for a batch session. Safe to update from workers."""

    dry_run: bool = False
    total_archives: int = 0
    completed: set[str] = field(default_factory=set)
    planned: set[str] = field(default_factory=set)
    failed: dict[str, str] = field(default_factory=dict)
    files_written: int = 0
    results: list[ArchiveResult] = field(default_factory=list, repr=False)
    start_time: float = field(default_factory=time.monotonic, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def record(self, result: ArchiveResult) -> None:
        """Adds one archive's outcome to the session totals."""
        with self._lock:
            self.results.append(result)
            if result.state is ArchiveState.COMPLETED:
                self.completed.add(result.name)
                self.files_written += result.files_written
            elif result.state is ArchiveState.PLANNED:
                self.planned.add(result.name)
            else:
                self.failed[result.name] = result.error or "unknown error"

    @property
    def duration_s(self) -> float:
        return time.monotonic() - self.start_time

    @property
    def all_succeeded(self) -> bool:
        return not self.failed
