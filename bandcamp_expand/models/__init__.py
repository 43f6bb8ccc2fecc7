"""
Data Models Layer.

This package contains the Pydantic configuration model and the dataclasses
that describe archives and batch statistics.
"""

from .config import ExpandConfig, load_config
from .record import ArchiveRecord, ArchiveResult, ArchiveState, CodecKind
from .stats import BatchStats

__all__ = [
    "ArchiveRecord",
    "ArchiveResult",
    "ArchiveState",
    "BatchStats",
    "CodecKind",
    "ExpandConfig",
    "load_config",
]
