"""
Exception hierarchy for enrichment runs.

Every error the run controller can recover from derives from EnrichmentError.
The controller turns them into a rejected or failed outcome; none of them is
allowed to escape mid-row.
"""

from typing import Optional


class EnrichmentError(Exception):
    """
    Base exception for all enrichment run errors.

    Args:
        message: Error description
        row_index: 0-based index of the row being processed, if known
    """

    def __init__(self, message: str, row_index: Optional[int] = None):
        self.message = message
        self.row_index = row_index

        if row_index is not None:
            full_message = f"{message} (row_index={row_index})"
        else:
            full_message = message

        super().__init__(full_message)


class DecodeError(EnrichmentError):
    """Input table is malformed or empty; the run never starts."""


class NoSourceColumnSelected(EnrichmentError):
    """No join column was selected, or the selected column is not in the table."""


class RowCeilingExceeded(EnrichmentError):
    """
    Raised when the table has more data rows than the configured ceiling.

    Args:
        limit: Configured row ceiling
        row_count: Number of data rows in the submitted table
    """

    def __init__(self, limit: int, row_count: int):
        self.limit = limit
        self.row_count = row_count
        super().__init__(
            f"Too many rows: {row_count:,} submitted. Maximum {limit:,} rows supported."
        )


class EmptyReferenceCollection(EnrichmentError):
    """No reference company has a usable domain; matching would be meaningless."""


class InternalFailure(EnrichmentError):
    """Unexpected error while enriching; the run fails and output is discarded."""


class RunCancelled(InternalFailure):
    """The caller signalled cancellation between row batches."""
