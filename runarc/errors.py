from __future__ import annotations

from typing import Optional


class RunarcError(Exception):
    """Base class for runarc-specific errors."""


class InvalidConfiguration(RunarcError, ValueError):
    pass


# Codec level
class CodecError(RunarcError):
    pass


class MalformedPayload(CodecError):
    def __init__(self, message: str, *, offset: Optional[int] = None):
        super().__init__(message)
        self.offset = offset


# Container level
class ArchiveFormatError(RunarcError):
    """Archive bytes are inconsistent with their own manifest.

    ``offset`` is the absolute position in the archive stream where the
    problem was detected; ``expected``/``actual`` are byte counts when the
    failure is a size mismatch.
    """

    def __init__(
        self,
        message: str,
        *,
        offset: Optional[int] = None,
        expected: Optional[int] = None,
        actual: Optional[int] = None,
    ):
        super().__init__(message)
        self.offset = offset
        self.expected = expected
        self.actual = actual


class TruncatedArchive(ArchiveFormatError):
    pass


# A manifest whose entry count cannot fit in the remaining bytes is a
# truncation of the manifest region.
class InvalidManifest(TruncatedArchive):
    pass


class UnexpectedTrailingData(ArchiveFormatError):
    pass


class InvalidEntryName(ArchiveFormatError):
    pass


# Storage
class StorageError(RunarcError, OSError):
    pass


class NotFound(StorageError, FileNotFoundError):
    pass


class DestinationExists(RunarcError):
    pass
