"""Public SDK surface for bulkcsv.

This module provides a stable import path for library users.
It re-exports the primary client, the pipeline entry, and typed models.
"""

from __future__ import annotations

from core.config import BulkCsvConfig
from core.types import IngestOptions, IngestSummary, ParseError, SourceRow
from ingest.document_builder import build_document
from ingest.pipeline import ingest_csv, run_ingest
from store.client_sdk import BulkCsvClient

__all__ = [
    "BulkCsvClient",
    "BulkCsvConfig",
    "IngestOptions",
    "IngestSummary",
    "ParseError",
    "SourceRow",
    "build_document",
    "ingest_csv",
    "run_ingest",
]
