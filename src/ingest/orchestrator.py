"""Consumer side of the ingest pipeline.

The orchestrator runs in two phases. Phase one waits for the header
under a fatal deadline. Phase two drains rows and parse errors under a
recurring idle window, turning each row into a document and handing it
to the sink in file order. Run counters live only on this thread.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any

from core.constants import DEFAULT_HEADER_TIMEOUT_SECONDS, DEFAULT_IDLE_TIMEOUT_SECONDS
from core.errors import BulkCsvIngestError, BulkCsvStoreError
from core.logging_config import get_logger
from core.types import DocumentSink, Header, IngestSummary, ParseError, SourceRow
from ingest.channels import Channel, PipelineChannels, select
from ingest.document_builder import build_document
from ingest.record_source import CsvRecordSource, start_record_source

_LOGGER = get_logger(__name__)


@dataclass
class IngestCounters:
    """Mutable per-run counters owned by the orchestrator."""

    records_seen: int = 0
    records_stored: int = 0
    records_rejected: int = 0

    @property
    def has_activity(self) -> bool:
        return self.records_seen > 0

    def to_summary(self, stalled: bool) -> IngestSummary:
        return IngestSummary(
            records_seen=self.records_seen,
            records_stored=self.records_stored,
            records_rejected=self.records_rejected,
            stalled=stalled,
        )


@dataclass(frozen=True)
class DrainResult:
    """Outcome of the drain phase."""

    counters: IngestCounters
    stalled: bool


class IngestOrchestrator:
    """Drive one ingest run from header receipt to final summary."""

    def __init__(
        self,
        sink: DocumentSink,
        *,
        header_timeout_seconds: float = DEFAULT_HEADER_TIMEOUT_SECONDS,
        idle_timeout_seconds: float = DEFAULT_IDLE_TIMEOUT_SECONDS,
        logger: Any | None = None,
    ) -> None:
        """Create an orchestrator.

        Args:
            sink: Destination receiving one document per valid row.
            header_timeout_seconds: Fatal deadline for the header.
            idle_timeout_seconds: Recurring window without any event.
            logger: Structured logger, defaults to the module logger.
        """
        self._sink = sink
        self._header_timeout = header_timeout_seconds
        self._idle_timeout = idle_timeout_seconds
        self._logger = logger or _LOGGER

    def run(self, source: CsvRecordSource, channels: PipelineChannels) -> IngestSummary:
        """Start the source thread and consume it to completion.

        Args:
            source: Producer to run on its own thread.
            channels: Fresh conduits for this run.

        Returns:
            Final run counters.

        Raises:
            BulkCsvIngestError: If no header arrives (fatal setup failure).
        """
        source_thread = start_record_source(source, channels)
        try:
            header = self.await_header(channels)
        except BulkCsvIngestError:
            channels.cancel()
            self._join_source(source_thread, self._header_timeout)
            raise
        try:
            result = self.drain(channels, header)
        except BaseException:
            channels.cancel()
            self._join_source(source_thread, self._idle_timeout)
            raise
        if result.stalled:
            channels.cancel()
            self._join_source(source_thread, self._idle_timeout)
        else:
            self._join_source(source_thread, None)
        self.flush_errors(channels)
        summary = result.counters.to_summary(result.stalled)
        self._logger.info(
            "ingest_summary",
            records_seen=summary.records_seen,
            records_stored=summary.records_stored,
            records_rejected=summary.records_rejected,
            stalled=summary.stalled,
        )
        return summary

    def await_header(self, channels: PipelineChannels) -> Header:
        """Phase one: wait for the header or a fatal error.

        Errors are polled first so a fatal cause is reported even when the
        source closed the header channel right after sending it.

        Raises:
            BulkCsvIngestError: On fatal parse error, early channel close, or timeout.
        """
        selection = select([channels.errors, channels.header], self._header_timeout)
        if selection is None:
            self._logger.error("header_timeout", timeout_seconds=self._header_timeout)
            raise BulkCsvIngestError(
                f"Timeout waiting for CSV header after {self._header_timeout} seconds."
            )
        if selection.channel is channels.errors and selection.ok:
            error = selection.item
            self._logger.error(
                "header_failed",
                kind=error.kind,
                fatal=error.fatal,
                error=error.message,
            )
            raise BulkCsvIngestError(f"Critical error during CSV reading setup: {error.message}")
        if not selection.ok:
            self._logger.error("header_channel_closed", channel=selection.channel.name)
            raise BulkCsvIngestError(
                "Failed to receive header: header channel closed unexpectedly."
            )
        header = selection.item
        self._logger.info("header_received", header=list(header), field_count=len(header))
        return header

    def drain(self, channels: PipelineChannels, header: Header) -> DrainResult:
        """Phase two: consume rows and parse errors until end-of-stream.

        The idle window is re-armed after every event. When it expires with
        no row seen yet the stream is treated as stalled and the phase ends
        gracefully; otherwise expiry is only a heartbeat.
        """
        counters = IngestCounters()
        waiting: list[Channel[Any]] = [channels.rows, channels.errors]
        while True:
            selection = select(waiting, self._idle_timeout)
            if selection is None:
                if not counters.has_activity:
                    self._logger.warning(
                        "ingest_stalled",
                        idle_timeout_seconds=self._idle_timeout,
                    )
                    return DrainResult(counters=counters, stalled=True)
                self._logger.info(
                    "ingest_idle_heartbeat",
                    idle_timeout_seconds=self._idle_timeout,
                    records_seen=counters.records_seen,
                )
                continue
            if selection.channel is channels.errors:
                if selection.ok:
                    self._log_parse_error(selection.item, phase="drain")
                else:
                    waiting = [channels.rows]
                continue
            if not selection.ok:
                return DrainResult(counters=counters, stalled=False)
            self._handle_row(header, selection.item, counters)

    def flush_errors(self, channels: PipelineChannels) -> None:
        """Close the error channel and log every pending parse error."""
        channels.errors.close()
        for error in channels.errors.drain():
            self._log_parse_error(error, phase="post_drain")

    def _handle_row(self, header: Header, row: SourceRow, counters: IngestCounters) -> None:
        counters.records_seen += 1
        if len(row.fields) != len(header):
            counters.records_rejected += 1
            self._logger.error(
                "record_rejected",
                reason="field_count_mismatch",
                record_number=counters.records_seen,
                line_number=row.line_number,
                field_count=len(row.fields),
                header_count=len(header),
                fields=list(row.fields),
            )
            return
        document = build_document(header, row.fields)
        try:
            self._sink.store(document)
        except BulkCsvStoreError as error:
            counters.records_rejected += 1
            self._logger.error(
                "record_store_failed",
                record_number=counters.records_seen,
                line_number=row.line_number,
                error=str(error),
            )
            return
        counters.records_stored += 1

    def _log_parse_error(self, error: ParseError, phase: str) -> None:
        self._logger.error(
            "parse_error",
            phase=phase,
            kind=error.kind,
            fatal=error.fatal,
            line_number=error.line_number,
            error=error.message,
        )

    def _join_source(self, source_thread: threading.Thread, timeout: float | None) -> None:
        """Wait for the source thread so its file handle is released."""
        source_thread.join(timeout)
        if source_thread.is_alive():
            self._logger.warning(
                "record_source_still_running",
                thread_name=source_thread.name,
                join_timeout_seconds=timeout,
            )
