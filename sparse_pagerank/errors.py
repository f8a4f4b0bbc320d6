# errors.py
#
# Project: Sparse PageRank - power iteration on a row-compressed matrix
#
# Description:
#   Exception types raised by the vector/matrix structures, the text
#   reader and the remote fetchers.  All of them are fatal at the point of
#   detection: main.py reports the message and exits non-zero, tests
#   assert on them with pytest.raises.


class PageRankError(Exception):
    """Base class for every error raised by this package."""


class ResourceExhausted(PageRankError, MemoryError):
    """A vector or matrix row could not be allocated."""


class MalformedInput(PageRankError, ValueError):
    """
    Sparse matrix input that does not follow the expected layout.

    Attributes:
        row (int|None): index of the row being read when the error was
            detected, or None when the header itself is bad.
    """

    def __init__(self, message, row=None):
        super().__init__(message)
        self.row = row


class DimensionMismatch(PageRankError, ValueError):
    """A vector whose dimension does not match the matrix it is applied to."""


class SourceUnavailable(PageRankError, OSError):
    """A remote matrix source (GCS object or URL) could not be fetched."""
