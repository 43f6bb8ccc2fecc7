"""
Utilities for handling file paths and archive entry names.
"""

import os
from collections.abc import Iterable
from pathlib import Path

from pathvalidate import sanitize_filename

from bandcamp_expand.exceptions import TraversalRejectedError

ENTRY_SEPARATOR = " - "

# Some labels stamp their own name in front of every track, e.g.
# "Lacerated Enemy records - THE RITUAL AURA - Taether - 01 Taethered.flac"
DEFAULT_LABEL_PREFIXES = ("Lacerated Enemy records - ",)


def create_dir(directory_path: Path) -> None:
    """Creates a directory if it does not already exist."""
    directory_path.mkdir(parents=True, exist_ok=True)


def resolve_within(root: Path, relative_path: str | os.PathLike) -> Path:
    """
    Resolves `relative_path` under `root` and ensures the result stays inside it.

    The comparison is a plain, case-sensitive string prefix check on the fully
    resolved paths. Case-sensitive volumes can be mounted inside
    case-insensitive ones, so case folding must not be trusted here.

    Raises:
        TraversalRejectedError: If the resolved path is not a strict
        descendant of `root`.
    """
    resolved_root = Path(root).resolve()
    candidate = (resolved_root / relative_path).resolve()

    root_str = str(resolved_root)
    if not root_str.endswith(os.sep):
        root_str += os.sep

    if not str(candidate).startswith(root_str):
        raise TraversalRejectedError(
            f"'{relative_path}' resolves outside of '{resolved_root}'"
        )
    return candidate


def strip_if_starts_with(value: str, prefix: str) -> str:
    """Removes `prefix` once from the start of `value`, ignoring case."""
    head = value[: len(prefix)]
    if len(head) == len(prefix) and head.casefold() == prefix.casefold():
        return value[len(prefix) :]
    return value


def strip_prefixes(entry_name: str, known_prefixes: Iterable[str]) -> str:
    """
    Strips each known prefix, in order, from the start of an entry name.

    Every prefix is tried exactly once against the result of the previous
    step, so a prefix listed twice removes up to two stamped copies.
    """
    for prefix in known_prefixes:
        entry_name = strip_if_starts_with(entry_name, prefix)
    return entry_name


def default_entry_prefixes(
    artist: str, album: str, label_prefixes: Iterable[str] = DEFAULT_LABEL_PREFIXES
) -> list[str]:
    """
    Builds the noise prefixes stripped from Bandcamp entry names.

    e.g. "NECROVILE - NECROVILE - Engorging The Devourmental Void - 01 I Kill.flac"
    double-stamps the artist, so the artist prefix is checked twice.
    """
    artist_prefix = f"{artist}{ENTRY_SEPARATOR}"
    return [
        *label_prefixes,
        artist_prefix,
        artist_prefix,
        f"{album}{ENTRY_SEPARATOR}",
    ]


def safe_component(name: str) -> str:
    """Sanitizes a single path component derived from untrusted metadata."""
    return sanitize_filename(name, platform="auto")
