"""bulkcsv exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
"""

from __future__ import annotations


class BulkCsvError(Exception):
    """Base exception for all bulkcsv failures."""


class BulkCsvConfigError(BulkCsvError):
    """Raised for invalid runtime configuration."""


class BulkCsvIngestError(BulkCsvError):
    """Raised when a run aborts before the header is received."""


class BulkCsvTransformError(BulkCsvError):
    """Raised when a row cannot be turned into a document."""


class BulkCsvStoreError(BulkCsvError):
    """Raised when the sink rejects a single document write."""


class BulkCsvConnectionError(BulkCsvError):
    """Raised when the sink handshake fails."""


class BulkCsvDependencyError(BulkCsvError):
    """Raised when an optional runtime dependency is missing."""


class ChannelClosedError(BulkCsvError):
    """Raised when sending on a closed pipeline channel."""
