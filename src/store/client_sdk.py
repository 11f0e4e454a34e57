"""Python SDK for bulk CSV ingestion.

This module exposes a small client wrapping configuration, the ingest
pipeline, and the MongoDB handshake.
"""

from __future__ import annotations

from core.config import BulkCsvConfig
from core.types import IngestOptions, IngestSummary
from ingest.pipeline import ingest_csv
from store.mongo_sink import connect_mongo_sink


class BulkCsvClient:
    """Primary SDK entry point for ingest workflows."""

    def __init__(self, config: BulkCsvConfig | None = None) -> None:
        """Create SDK client.

        Args:
            config: Optional runtime configuration.
        """
        self._config = config or BulkCsvConfig.from_env()

    @property
    def config(self) -> BulkCsvConfig:
        return self._config

    def default_options(self) -> IngestOptions:
        """Build ingest options from configured defaults."""
        return IngestOptions(
            source_path=self._config.csv_file,
            database_name=self._config.database_name,
            collection_name=self._config.collection_name,
        )

    def ingest(self, options: IngestOptions | None = None) -> IngestSummary:
        """Stream a CSV file into MongoDB.

        Args:
            options: Ingest options; configured defaults when omitted.

        Returns:
            Final run counters.

        Raises:
            BulkCsvConnectionError: If MongoDB is unreachable.
            BulkCsvIngestError: If the CSV header cannot be read.
        """
        return ingest_csv(options or self.default_options(), self._config)

    def ping(self) -> None:
        """Run the MongoDB connect and liveness handshake only.

        Raises:
            BulkCsvConnectionError: If MongoDB is unreachable.
        """
        sink = connect_mongo_sink(
            self._config.mongo_uri,
            self._config.database_name,
            self._config.collection_name,
            connect_timeout_seconds=self._config.connect_timeout_seconds,
            store_timeout_seconds=self._config.store_timeout_seconds,
        )
        sink.close()
