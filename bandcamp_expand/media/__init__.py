"""
Media Processing Layer.

This package is responsible for reading archives: classifying their audio,
extracting their entries, and validating the extracted files.
"""

from .extractor import ArchiveExtractor
from .inspector import ArchiveInspector
from .integrity import FileIntegrityChecker

__all__ = ["ArchiveExtractor", "ArchiveInspector", "FileIntegrityChecker"]
