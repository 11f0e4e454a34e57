"""Shared typed models.

This module defines immutable data models passed between the record
source, the ingest orchestrator, the document sink, and the CLI.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Mapping, Protocol

from core.constants import DEFAULT_DELIMITER

ParseErrorKind = Literal["open", "empty", "header", "row", "read"]
Header = tuple[str, ...]
Document = dict[str, str]


@dataclass(frozen=True)
class SourceRow:
    """One parsed data record from the input file.

    Attributes:
        line_number: Physical line the record ended on.
        fields: Field values in file order, never length-checked.
    """

    line_number: int
    fields: tuple[str, ...]


@dataclass(frozen=True)
class ParseError:
    """Parse failure reported by the record source.

    Attributes:
        kind: Failure category. ``row`` is the only recoverable kind.
        message: Human-readable description including the source path.
        line_number: Approximate line number, when known.
        cause: Text of the underlying exception, when there is one.
    """

    kind: ParseErrorKind
    message: str
    line_number: int | None = None
    cause: str | None = None

    @property
    def fatal(self) -> bool:
        """Return whether this error ends the stream."""
        return self.kind != "row"

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class IngestOptions:
    """Ingest command options.

    Attributes:
        source_path: CSV file to ingest.
        database_name: Destination database name.
        collection_name: Destination collection name.
        delimiter: Single-character field delimiter.
    """

    source_path: str
    database_name: str
    collection_name: str
    delimiter: str = DEFAULT_DELIMITER


@dataclass(frozen=True)
class IngestSummary:
    """Final counters of one ingest run.

    Attributes:
        records_seen: Rows received from the source.
        records_stored: Rows the sink accepted.
        records_rejected: Rows dropped for a field-count mismatch or a store failure.
        stalled: Whether the drain loop ended on the idle timeout.
    """

    records_seen: int
    records_stored: int
    records_rejected: int
    stalled: bool = False

    @property
    def records_total(self) -> int:
        """Return stored plus rejected rows."""
        return self.records_stored + self.records_rejected

    def summary_line(self) -> str:
        """Render the human-readable run summary."""
        return (
            f"{self.records_seen} seen, "
            f"{self.records_stored} stored, "
            f"{self.records_rejected} rejected"
        )


class DocumentSink(Protocol):
    """Destination accepting one document per call."""

    def store(self, document: Mapping[str, str]) -> None:
        """Persist one document or raise ``BulkCsvStoreError``."""
