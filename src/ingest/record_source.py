"""CSV record source for the ingest pipeline.

This module parses a delimited file into one header event followed by
row events, reporting malformed rows as recoverable parse errors. It
runs on its own thread and never raises across the thread boundary.
"""

from __future__ import annotations

import csv
import sys
import threading
from pathlib import Path
from typing import Any, Iterator, TextIO

from core.constants import (
    DEFAULT_DELIMITER,
    DEFAULT_QUOTE_CHAR,
    DEFAULT_SOURCE_ENCODING,
    RECORD_SOURCE_THREAD_NAME,
)
from core.errors import ChannelClosedError
from core.logging_config import get_logger
from core.types import Header, ParseError, SourceRow
from ingest.channels import PipelineChannels

_LOGGER = get_logger(__name__)


class CsvRecordSource:
    """Producer that streams one CSV file through pipeline channels."""

    def __init__(
        self,
        source_path: str | Path,
        delimiter: str = DEFAULT_DELIMITER,
        logger: Any | None = None,
    ) -> None:
        """Create a record source.

        Args:
            source_path: CSV file to read.
            delimiter: Single-character field delimiter.
            logger: Structured logger, defaults to the module logger.
        """
        self._source_path = Path(source_path)
        self._delimiter = delimiter
        self._logger = logger or _LOGGER

    @property
    def source_path(self) -> Path:
        return self._source_path

    def run(self, channels: PipelineChannels) -> None:
        """Emit header, rows, and parse errors, then close the stream.

        The header and row channels are closed exactly once on every exit
        path, after the last row was delivered.

        Args:
            channels: Conduits shared with the orchestrator.
        """
        try:
            self._emit(channels)
        except ChannelClosedError:
            self._logger.warning("record_source_cancelled", source_path=str(self._source_path))
        finally:
            channels.close_stream()

    def _emit(self, channels: PipelineChannels) -> None:
        self._logger.info("record_source_opening", source_path=str(self._source_path))
        try:
            handle = self._source_path.open("r", encoding=DEFAULT_SOURCE_ENCODING, newline="")
        except OSError as error:
            channels.errors.send(
                ParseError(
                    kind="open",
                    message=f"error opening file {self._source_path}: {error}",
                    cause=str(error),
                )
            )
            return
        with handle:
            raise_field_size_limit()
            lines = _RawLineRecorder(handle)
            reader = csv.reader(
                lines,
                delimiter=self._delimiter,
                quotechar=DEFAULT_QUOTE_CHAR,
                strict=True,
            )
            header_or_error = self._read_header(reader, lines)
            if isinstance(header_or_error, ParseError):
                channels.errors.send(header_or_error)
                return
            channels.header.send(header_or_error)
            self._emit_rows(reader, lines, channels)

    def _read_header(
        self,
        reader: Iterator[list[str]],
        lines: "_RawLineRecorder",
    ) -> Header | ParseError:
        """Read the first non-blank record as the header.

        Returns:
            Header fields, or a fatal parse error distinguishing empty input
            from any other read failure.
        """
        try:
            for fields in reader:
                raw_record = lines.take()
                if not fields:
                    continue
                if has_bare_quote(raw_record, self._delimiter):
                    raise csv.Error(f'bare {DEFAULT_QUOTE_CHAR} in non-quoted field')
                return tuple(fields)
        except (csv.Error, OSError, UnicodeDecodeError) as error:
            return ParseError(
                kind="header",
                message=f"error reading header from CSV {self._source_path}: {error}",
                line_number=_line_number(reader),
                cause=str(error),
            )
        return ParseError(kind="empty", message=f"CSV file {self._source_path} is empty")

    def _emit_rows(
        self,
        reader: Iterator[list[str]],
        lines: "_RawLineRecorder",
        channels: PipelineChannels,
    ) -> None:
        """Send every data row; malformed records become parse errors."""
        row_count = 0
        while True:
            try:
                fields = next(reader)
                raw_record = lines.take()
                if fields and has_bare_quote(raw_record, self._delimiter):
                    raise csv.Error(f'bare {DEFAULT_QUOTE_CHAR} in non-quoted field')
            except StopIteration:
                break
            except csv.Error as error:
                lines.take()
                line_number = _line_number(reader)
                channels.errors.send(
                    ParseError(
                        kind="row",
                        message=(
                            f"error reading record at line {line_number} from CSV "
                            f"{self._source_path}: {error}. Skipping row"
                        ),
                        line_number=line_number,
                        cause=str(error),
                    )
                )
                continue
            except (OSError, UnicodeDecodeError) as error:
                channels.errors.send(
                    ParseError(
                        kind="read",
                        message=f"error reading CSV {self._source_path}: {error}",
                        line_number=_line_number(reader),
                        cause=str(error),
                    )
                )
                return
            if not fields:
                continue
            channels.rows.send(SourceRow(line_number=_line_number(reader), fields=tuple(fields)))
            row_count += 1
        self._logger.info(
            "record_source_finished",
            source_path=str(self._source_path),
            row_count=row_count,
        )


class _RawLineRecorder:
    """Line iterator keeping the raw text of the record being parsed."""

    def __init__(self, handle: TextIO) -> None:
        self._handle = handle
        self._lines: list[str] = []

    def __iter__(self) -> "_RawLineRecorder":
        return self

    def __next__(self) -> str:
        line = next(self._handle)
        self._lines.append(line)
        return line

    def take(self) -> str:
        """Return and forget the lines consumed since the last call."""
        raw_record = "".join(self._lines)
        self._lines.clear()
        return raw_record


def has_bare_quote(raw_record: str, delimiter: str, quote_char: str = DEFAULT_QUOTE_CHAR) -> bool:
    """Return whether a quote appears inside a field that did not open with one.

    The stdlib parser keeps such quotes as literal text; they are reported
    as malformed quoting instead.

    Args:
        raw_record: Raw text of one record, possibly spanning several lines.
        delimiter: Field delimiter.
        quote_char: Quote character.
    """
    state = "start"
    for char in raw_record:
        if state == "quoted":
            if char == quote_char:
                state = "after_quote"
        elif state == "after_quote":
            state = "quoted" if char == quote_char else "start"
        elif char == delimiter or char in "\r\n":
            state = "start"
        elif char == quote_char:
            if state == "unquoted":
                return True
            state = "quoted"
        else:
            state = "unquoted"
    return False


def raise_field_size_limit() -> int:
    """Lift the csv field size limit to the largest value the platform accepts.

    Returns:
        The limit in effect.
    """
    limit = sys.maxsize
    while True:
        try:
            csv.field_size_limit(limit)
        except OverflowError:
            limit //= 2
            continue
        return limit


def start_record_source(source: CsvRecordSource, channels: PipelineChannels) -> threading.Thread:
    """Run a record source on a dedicated daemon thread.

    Args:
        source: Producer to run.
        channels: Conduits shared with the orchestrator.

    Returns:
        The started thread, joined by the orchestrator at run end.
    """
    thread = threading.Thread(
        target=source.run,
        args=(channels,),
        name=RECORD_SOURCE_THREAD_NAME,
        daemon=True,
    )
    thread.start()
    return thread


def _line_number(reader: Iterator[list[str]]) -> int:
    """Return the physical line count consumed so far by a csv reader."""
    return int(getattr(reader, "line_num", 0))
