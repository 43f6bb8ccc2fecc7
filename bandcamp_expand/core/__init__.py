"""
Core application engine for orchestrating the expansion process.

This package contains the primary logic. The `BatchManager` acts
as the high-level session coordinator, delegating the task of processing
each individual archive to the `ArchiveProcessor`.
"""

from .archive_processor import ArchiveProcessor
from .batch_manager import BatchManager, discover_archives

__all__ = ["ArchiveProcessor", "BatchManager", "discover_archives"]
