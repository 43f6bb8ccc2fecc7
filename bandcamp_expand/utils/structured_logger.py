"""
Structured logging system for better log analysis and debugging.
Provides JSON-formatted event logs plus a per-archive logger adapter.
"""

import json
import logging
import sys
import threading
import time
from datetime import datetime
from pathlib import Path
from typing import Any

from rich.markup import escape

EVENTS_LOGGER = "bandcamp_expand.events"


class ArchiveLogger(logging.LoggerAdapter):
    """
    Prefixes every message with the name of the archive being processed, so
    interleaved output from concurrent workers stays attributable.
    """

    def __init__(self, logger: logging.Logger, archive_name: str):
        super().__init__(logger, {"archive": archive_name})

    def process(self, msg, kwargs):
        tag = escape(f"[{self.extra['archive']}]")
        return f"[dim]{tag}[/dim] {msg}", kwargs


class StructuredLogger:
    """
    Logger that mirrors events to the console logger and, optionally, to a
    machine-parseable JSON-lines file.

    Usage:
        logger = StructuredLogger("bandcamp_expand", log_dir=Path("logs"))
        logger.info("archive_completed", archive="A - B.zip", files_written=12)
    """

    def __init__(
        self,
        name: str,
        log_dir: Path | None = None,
        enable_json: bool = True,
    ):
        """
        Initialize structured logger.

        Args:
            name: Logger name
            log_dir: Directory for JSON log files (None = disabled)
            enable_json: Enable JSON file logging
        """
        self.name = name
        self.log_dir = log_dir
        self.enable_json = enable_json and log_dir is not None

        self._logger = logging.getLogger(name)
        # Workers emit events concurrently
        self._write_lock = threading.Lock()

        self._json_file = None
        if self.enable_json:
            log_dir.mkdir(parents=True, exist_ok=True)
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            json_log_path = log_dir / f"bandcamp_expand_{timestamp}.jsonl"
            self._json_file = open(json_log_path, "a", encoding="utf-8")  # noqa: SIM115

        self._session_context: dict[str, Any] = {
            "session_id": f"{int(time.time())}_{id(self)}",
            "start_time": datetime.now().isoformat(),
        }

    @property
    def json_path(self) -> Path | None:
        return Path(self._json_file.name) if self._json_file else None

    def set_session_context(self, **kwargs) -> None:
        """Set session-level context that appears in all logs."""
        self._session_context.update(kwargs)

    def _format_message(self, event: str, **context) -> str:
        parts = [f"[{event}]"]
        parts.extend(f"{key}={value}" for key, value in context.items())
        return " ".join(parts)

    def _emit(self, level: int, event: str, **context) -> None:
        # Console mirror stays at debug level, the human-readable messages are
        # logged by the components themselves.
        self._logger.debug(escape(self._format_message(event, **context)))
        if not self.enable_json:
            return

        entry = {
            "timestamp": datetime.now().isoformat(),
            "level": logging.getLevelName(level),
            "event": event,
            **self._session_context,
            **context,
        }
        with self._write_lock:
            if not self._json_file or self._json_file.closed:
                return
            try:
                self._json_file.write(json.dumps(entry, default=str) + "\n")
                self._json_file.flush()
            except OSError as e:
                print(f"JSON logging failed: {e}", file=sys.stderr)

    def info(self, event: str, **context) -> None:
        self._emit(logging.INFO, event, **context)

    def error(self, event: str, **context) -> None:
        self._emit(logging.ERROR, event, **context)

    def close(self) -> None:
        """Close JSON log file."""
        with self._write_lock:
            if self._json_file and not self._json_file.closed:
                self._json_file.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class SessionLogger:
    """Specialized logger for batch session events."""

    def __init__(self, logger: StructuredLogger):
        self.logger = logger

    def session_started(
        self, total_archives: int, max_workers: int | None, dry_run: bool = False
    ):
        self.logger.info(
            "session_started",
            total_archives=total_archives,
            max_workers=max_workers,
            dry_run=dry_run,
        )

    def archive_completed(
        self, archive: str, codec: str, artist: str, album: str, files_written: int
    ):
        self.logger.info(
            "archive_completed",
            archive=archive,
            codec=codec,
            artist=artist,
            album=album,
            files_written=files_written,
        )

    def archive_failed(self, archive: str, stage: str, error: str):
        self.logger.error(
            "archive_failed",
            archive=archive,
            stage=stage,
            error=error,
        )

    def session_completed(self, duration_s: float, completed: int, failed: int):
        self.logger.info(
            "session_completed",
            duration_s=round(duration_s, 2),
            completed=completed,
            failed=failed,
        )


def create_structured_logger(
    log_dir: Path | None = None,
) -> tuple[StructuredLogger, SessionLogger]:
    """
    Create the structured loggers for a batch run.

    Returns:
        Tuple of (base_logger, session_logger)
    """
    base = StructuredLogger(
        EVENTS_LOGGER, log_dir=log_dir, enable_json=log_dir is not None
    )
    return base, SessionLogger(base)
