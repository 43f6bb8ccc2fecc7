"""
Defines custom exceptions for the application to allow for more specific error handling.
"""


class BandcampExpandError(Exception):
    """Base exception for all application-specific errors."""


class MalformedFilenameError(BandcampExpandError):
    """Raised when an archive name does not follow the 'Artist - Album' convention."""


class UnknownCodecError(BandcampExpandError):
    """Raised when no recognizable audio file can be found inside an archive."""


class DirectoryMissingError(BandcampExpandError):
    """Raised when a directory expected to exist (e.g. staging) is not there."""


class TraversalRejectedError(BandcampExpandError):
    """
    Raised when an archive entry resolves to a location outside of its
    extraction root.
    """


class ArchiveReadError(BandcampExpandError):
    """Raised when an archive cannot be opened or read as a zip container."""


class ConfigurationError(BandcampExpandError):
    """Raised for issues related to configuration loading or validation."""


class FileIntegrityError(BandcampExpandError):
    """Raised when an extracted audio file fails a post-extraction integrity check."""
