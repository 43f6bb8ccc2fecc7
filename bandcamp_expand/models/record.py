"""
Data models describing a single archive as it moves through the pipeline.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class CodecKind(str, Enum):
    """Dominant audio encoding of an archive; doubles as the library folder name."""

    FLAC = "FLAC"
    AAC = "AAC"
    UNKNOWN = "Unknown"


class ArchiveState(str, Enum):
    """Lifecycle of an archive: DISCOVERED -> ... -> COMPLETED, or FAILED."""

    DISCOVERED = "discovered"
    CLASSIFIED = "classified"
    STAGED = "staged"
    MERGED = "merged"
    COMPLETED = "completed"
    PLANNED = "planned"  # dry run stops after classification
    FAILED = "failed"


@dataclass
class ArchiveRecord:
    """Mutable working state for one archive under processing."""

    source_path: Path
    artist: str = ""
    album: str = ""
    codec: CodecKind = CodecKind.UNKNOWN
    state: ArchiveState = ArchiveState.DISCOVERED
    staging_album_dir: Path | None = None
    library_album_dir: Path | None = None
    files_written: int = 0

    @property
    def name(self) -> str:
        return self.source_path.name

    @property
    def staging_artist_dir(self) -> Path | None:
        return self.staging_album_dir.parent if self.staging_album_dir else None

    @property
    def library_artist_dir(self) -> Path | None:
        return self.library_album_dir.parent if self.library_album_dir else None

    def advance(self, state: ArchiveState) -> None:
        self.state = state


@dataclass(frozen=True)
class ArchiveResult:
    """Outcome of processing one archive."""

    name: str
    state: ArchiveState
    codec: CodecKind = CodecKind.UNKNOWN
    artist: str = ""
    album: str = ""
    files_written: int = 0
    error: str | None = None
    failed_stage: ArchiveState | None = None
    destination: Path | None = field(default=None, compare=False)

    @classmethod
    def from_record(cls, record: ArchiveRecord) -> "ArchiveResult":
        return cls(
            name=record.name,
            state=record.state,
            codec=record.codec,
            artist=record.artist,
            album=record.album,
            files_written=record.files_written,
            destination=record.library_album_dir,
        )

    @classmethod
    def failure(cls, record: ArchiveRecord, error: Exception) -> "ArchiveResult":
        return cls(
            name=record.name,
            state=ArchiveState.FAILED,
            codec=record.codec,
            artist=record.artist,
            album=record.album,
            files_written=record.files_written,
            error=f"{type(error).__name__}: {error}",
            failed_stage=record.state,
        )
