"""Exception hierarchy for rid_index.

Defines all custom exceptions used throughout the implementation.
"""

from __future__ import annotations


class RidIndexError(Exception):
    """Base exception for all rid_index errors."""
    pass


class UnsortedInputError(RidIndexError):
    """Raised when a record stream violates the key ordering during a build."""
    pass


class IndexCorruptError(RidIndexError):
    """Raised when an index blob is truncated, malformed or fails its checksum."""
    pass


class IndexMismatchError(RidIndexError):
    """Raised in strict lookups when the index does not describe the stream."""
    pass


class RecordFormatError(RidIndexError):
    """Raised when a record file has a bad header or a truncated record."""
    pass


class StaleIndexError(RidIndexError):
    """Raised when an index is older than its data file and policy is 'error'."""
    pass


class StaleIndexWarning(UserWarning):
    """Issued when an index is older than its data file and policy is 'warn'."""
    pass
