"""
Parses band and album names out of Bandcamp download filenames.

Filenames are usually something like:
    Psycroptic - As the Kingdom Drowns (pre-order).zip
although a repeated download carries a trailing marker:
    Psycroptic - As the Kingdom Drowns (pre-order) (1).zip
"""

import re

from bandcamp_expand.exceptions import MalformedFilenameError
from bandcamp_expand.utils.path import ENTRY_SEPARATOR

EXTENSION_LENGTH = 4  # ".zip"

# Only a single digit is recognized, "(12)" is left alone.
_DUPLICATE_MARKER = re.compile(r" \([0-9]\)")


def _split_on_separator(filename: str) -> tuple[str, str]:
    head, sep, tail = filename.partition(ENTRY_SEPARATOR)
    if not sep:
        raise MalformedFilenameError(
            f"'{filename}' has no '{ENTRY_SEPARATOR}' separator. "
            "Is this a Bandcamp download?"
        )
    return head, tail


def parse_artist(filename: str) -> str:
    """Returns everything before the first ' - ' separator."""
    artist, _ = _split_on_separator(filename)
    return artist


def parse_album(filename: str) -> str:
    """
    Returns everything after the first ' - ' separator, minus the file
    extension and any single-digit duplicate download marker.
    """
    _, album_with_extension = _split_on_separator(filename)
    if len(album_with_extension) < EXTENSION_LENGTH:
        raise MalformedFilenameError(
            f"'{filename}' is too short to contain an album name and extension."
        )

    album = album_with_extension[: len(album_with_extension) - EXTENSION_LENGTH]
    if len(album) > 4 and _DUPLICATE_MARKER.fullmatch(album[-4:]):
        album = album[:-4]
    return album


def parse_filename(filename: str) -> tuple[str, str]:
    """Parses both the artist and the album from a filename."""
    return parse_artist(filename), parse_album(filename)
