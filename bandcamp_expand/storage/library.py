"""
Merges staged files into the permanent codec/artist/album library tree.
"""

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path

from rich.markup import escape

from bandcamp_expand.exceptions import DirectoryMissingError
from bandcamp_expand.utils.path import create_dir

log = logging.getLogger(__name__)


@dataclass
class MergeSummary:
    """Counts what a merge did to the destination tree."""

    copied: int = 0
    replaced: int = 0
    skipped: int = 0

    def __iadd__(self, other: "MergeSummary") -> "MergeSummary":
        self.copied += other.copied
        self.replaced += other.replaced
        self.skipped += other.skipped
        return self


class TreeMerger:
    """
    Recursively copies a directory into another one without losing data.

    A destination file with the same size as the source is treated as an
    already merged duplicate and left alone; a size mismatch is treated as an
    incomplete earlier copy and replaced. Two different files of identical
    size are indistinguishable here. Nothing in the source is ever removed.
    """

    def __init__(self, logger: logging.Logger | logging.LoggerAdapter | None = None):
        self.log = logger or log

    def merge(
        self, source_dir: Path, dest_dir: Path, recursive: bool = True
    ) -> MergeSummary:
        """
        Merges `source_dir` into `dest_dir`.

        Raises:
            DirectoryMissingError: If `source_dir` does not exist.
        """
        if not source_dir.is_dir():
            raise DirectoryMissingError(
                f"Source directory does not exist or could not be found: {source_dir}"
            )

        create_dir(dest_dir)
        summary = MergeSummary()
        subdirs = []
        for entry in sorted(source_dir.iterdir()):
            if entry.is_dir():
                subdirs.append(entry)
            elif entry.is_file():
                self._merge_file(entry, dest_dir / entry.name, summary)

        if recursive:
            for subdir in subdirs:
                summary += self.merge(subdir, dest_dir / subdir.name, recursive)
        return summary

    def _merge_file(self, source: Path, target: Path, summary: MergeSummary) -> None:
        if target.exists():
            source_size = source.stat().st_size
            target_size = target.stat().st_size
            if source_size == target_size:
                self.log.warning(
                    f"File: {escape(str(target))} already exists, skipping..."
                )
                summary.skipped += 1
                return
            self.log.error(
                f"File: {escape(str(target))} already exists, but has a filesize "
                f"mismatch, copying again ({source_size} != {target_size})"
            )
            target.unlink(missing_ok=True)
            summary.replaced += 1
        else:
            summary.copied += 1

        self.log.debug(
            f"Copying from {escape(str(source))} to {escape(str(target))}"
        )
        shutil.copy2(source, target)
