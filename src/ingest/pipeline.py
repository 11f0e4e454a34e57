"""Ingest orchestration for one CSV-to-MongoDB run.

This module wires the record source, pipeline channels, orchestrator,
and document sink together for a single bulk ingest.
"""

from __future__ import annotations

from typing import Any

from core.config import BulkCsvConfig
from core.logging_config import get_logger
from core.types import DocumentSink, IngestOptions, IngestSummary
from ingest.channels import PipelineChannels
from ingest.orchestrator import IngestOrchestrator
from ingest.record_source import CsvRecordSource
from store.mongo_sink import connect_mongo_sink

_LOGGER = get_logger(__name__)


def run_ingest(
    options: IngestOptions,
    config: BulkCsvConfig,
    sink: DocumentSink,
    logger: Any | None = None,
) -> IngestSummary:
    """Stream one CSV file into an already connected sink.

    Args:
        options: Ingest request options.
        config: Runtime configuration supplying timeouts and buffer size.
        sink: Destination receiving one document per valid row.
        logger: Structured logger shared by source and orchestrator.

    Returns:
        Final run counters.

    Raises:
        BulkCsvIngestError: If the header cannot be obtained.
    """
    active_logger = logger or _LOGGER
    source = CsvRecordSource(options.source_path, options.delimiter, logger=active_logger)
    orchestrator = IngestOrchestrator(
        sink,
        header_timeout_seconds=config.header_timeout_seconds,
        idle_timeout_seconds=config.idle_timeout_seconds,
        logger=active_logger,
    )
    channels = PipelineChannels(config.error_buffer_size)
    active_logger.info(
        "ingest_started",
        source_path=options.source_path,
        database_name=options.database_name,
        collection_name=options.collection_name,
    )
    return orchestrator.run(source, channels)


def ingest_csv(options: IngestOptions, config: BulkCsvConfig) -> IngestSummary:
    """Connect to MongoDB, run the pipeline, and always disconnect.

    Args:
        options: Ingest request options.
        config: Runtime configuration.

    Returns:
        Final run counters.

    Raises:
        BulkCsvConnectionError: If MongoDB is unreachable.
        BulkCsvIngestError: If the header cannot be obtained.
    """
    _log_configuration(options, config)
    sink = connect_mongo_sink(
        config.mongo_uri,
        options.database_name,
        options.collection_name,
        connect_timeout_seconds=config.connect_timeout_seconds,
        store_timeout_seconds=config.store_timeout_seconds,
    )
    try:
        return run_ingest(options, config, sink)
    finally:
        sink.close()


def _log_configuration(options: IngestOptions, config: BulkCsvConfig) -> None:
    """Log effective settings at start-up."""
    _LOGGER.info(
        "ingest_configuration",
        source_path=options.source_path,
        database_name=options.database_name,
        collection_name=options.collection_name,
        delimiter=options.delimiter,
        header_timeout_seconds=config.header_timeout_seconds,
        idle_timeout_seconds=config.idle_timeout_seconds,
        connect_timeout_seconds=config.connect_timeout_seconds,
        store_timeout_seconds=config.store_timeout_seconds,
    )
