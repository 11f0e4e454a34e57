"""bulkcsv CLI entry points.
This module exposes the ingest and ping commands.
It maps argparse commands onto SDK calls.
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from typing import Any, Sequence

from core.config import BulkCsvConfig, parse_timeout_seconds
from core.constants import DEFAULT_LOG_LEVEL, SUPPORTED_LOG_LEVELS
from core.errors import BulkCsvConfigError, BulkCsvError
from core.logging_config import configure_logging
from core.types import IngestOptions
from store.client_sdk import BulkCsvClient


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(
        prog="bulkcsv",
        description="Stream CSV records into MongoDB",
    )
    parser.add_argument("--mongo-uri", help="Override BULKCSV_MONGO_URI for this command")
    parser.add_argument(
        "--log-level",
        default=DEFAULT_LOG_LEVEL,
        choices=SUPPORTED_LOG_LEVELS,
        help="Minimum log level written to stderr",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_ingest_command(subparsers)
    _add_ping_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the bulkcsv CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code. Fatal setup failures return 1.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        configure_logging(args.log_level)
        client = _build_client(args)
        if args.command == "ingest":
            return _run_ingest_command(client, args)
        if args.command == "ping":
            return _run_ping_command(client)
    except BulkCsvError as error:
        print(f"error: {error}", file=sys.stderr)
        return 1
    parser.error(f"Unsupported command: {args.command}")
    return 2


def entrypoint() -> None:
    """Console script wrapper around :func:`main`."""
    raise SystemExit(main())


def _build_client(args: argparse.Namespace) -> BulkCsvClient:
    """Build SDK client with command-line overrides applied.

    Args:
        args: Parsed CLI args.

    Returns:
        Configured SDK client.

    Raises:
        BulkCsvConfigError: If environment or flag values are invalid.
    """
    config = BulkCsvConfig.from_env()
    if args.mongo_uri:
        config = replace(config, mongo_uri=args.mongo_uri)
    if getattr(args, "header_timeout", None):
        config = replace(
            config,
            header_timeout_seconds=parse_timeout_seconds("--header-timeout", args.header_timeout),
        )
    if getattr(args, "idle_timeout", None):
        config = replace(
            config,
            idle_timeout_seconds=parse_timeout_seconds("--idle-timeout", args.idle_timeout),
        )
    return BulkCsvClient(config)


def _run_ingest_command(client: BulkCsvClient, args: argparse.Namespace) -> int:
    """Handle ingest command.

    Args:
        client: SDK client.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    if len(args.delimiter) != 1:
        raise BulkCsvConfigError(
            f"Invalid --delimiter value '{args.delimiter}': expected a single character."
        )
    config = client.config
    options = IngestOptions(
        source_path=args.csv_file or config.csv_file,
        database_name=args.db_name or config.database_name,
        collection_name=args.collection_name or config.collection_name,
        delimiter=args.delimiter,
    )
    summary = client.ingest(options)
    print(summary.summary_line())
    return 0


def _run_ping_command(client: BulkCsvClient) -> int:
    """Handle ping command."""
    client.ping()
    print("ok")
    return 0


def _add_ingest_command(subparsers: Any) -> None:
    """Register ingest subcommand."""
    parser = subparsers.add_parser("ingest", help="Stream one CSV file into a collection")
    parser.add_argument("--csv-file", help="Path to the CSV file to process")
    parser.add_argument("--db-name", help="MongoDB database name")
    parser.add_argument("--collection-name", help="MongoDB collection name")
    parser.add_argument("--delimiter", default=",", help="Single-character field delimiter")
    parser.add_argument("--header-timeout", help="Seconds to wait for the CSV header")
    parser.add_argument("--idle-timeout", help="Seconds without activity before a stall is assumed")


def _add_ping_command(subparsers: Any) -> None:
    """Register ping subcommand."""
    subparsers.add_parser("ping", help="Check that MongoDB is reachable")
