"""Runtime configuration model for bulkcsv.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os

from core.constants import (
    DEFAULT_COLLECTION_NAME,
    DEFAULT_CONNECT_TIMEOUT_SECONDS,
    DEFAULT_CSV_FILE,
    DEFAULT_DATABASE_NAME,
    DEFAULT_ERROR_BUFFER_SIZE,
    DEFAULT_HEADER_TIMEOUT_SECONDS,
    DEFAULT_IDLE_TIMEOUT_SECONDS,
    DEFAULT_MONGO_URI,
    DEFAULT_STORE_TIMEOUT_SECONDS,
)
from core.errors import BulkCsvConfigError


@dataclass(frozen=True)
class BulkCsvConfig:
    """Validated runtime configuration.

    Attributes:
        csv_file: Default input path when a command does not name one.
        mongo_uri: MongoDB connection URI.
        database_name: Destination database name.
        collection_name: Destination collection name.
        header_timeout_seconds: Fatal deadline for receiving the CSV header.
        idle_timeout_seconds: Recurring liveness window while draining rows.
        connect_timeout_seconds: Bound on the MongoDB connect/ping handshake.
        store_timeout_seconds: Bound on a single document insert.
        error_buffer_size: Capacity of the parse-error channel.
    """

    csv_file: str = DEFAULT_CSV_FILE
    mongo_uri: str = DEFAULT_MONGO_URI
    database_name: str = DEFAULT_DATABASE_NAME
    collection_name: str = DEFAULT_COLLECTION_NAME
    header_timeout_seconds: float = DEFAULT_HEADER_TIMEOUT_SECONDS
    idle_timeout_seconds: float = DEFAULT_IDLE_TIMEOUT_SECONDS
    connect_timeout_seconds: float = DEFAULT_CONNECT_TIMEOUT_SECONDS
    store_timeout_seconds: float = DEFAULT_STORE_TIMEOUT_SECONDS
    error_buffer_size: int = DEFAULT_ERROR_BUFFER_SIZE

    @classmethod
    def from_env(cls) -> "BulkCsvConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            BulkCsvConfigError: If environment values are invalid.
        """
        return cls(
            csv_file=os.getenv("BULKCSV_CSV_FILE", DEFAULT_CSV_FILE),
            mongo_uri=os.getenv("BULKCSV_MONGO_URI", DEFAULT_MONGO_URI),
            database_name=os.getenv("BULKCSV_DB_NAME", DEFAULT_DATABASE_NAME),
            collection_name=os.getenv("BULKCSV_COLLECTION_NAME", DEFAULT_COLLECTION_NAME),
            header_timeout_seconds=_read_seconds(
                "BULKCSV_HEADER_TIMEOUT", DEFAULT_HEADER_TIMEOUT_SECONDS
            ),
            idle_timeout_seconds=_read_seconds("BULKCSV_IDLE_TIMEOUT", DEFAULT_IDLE_TIMEOUT_SECONDS),
            connect_timeout_seconds=_read_seconds(
                "BULKCSV_CONNECT_TIMEOUT", DEFAULT_CONNECT_TIMEOUT_SECONDS
            ),
            store_timeout_seconds=_read_seconds(
                "BULKCSV_STORE_TIMEOUT", DEFAULT_STORE_TIMEOUT_SECONDS
            ),
            error_buffer_size=_read_buffer_size(
                "BULKCSV_ERROR_BUFFER_SIZE", DEFAULT_ERROR_BUFFER_SIZE
            ),
        )


def parse_timeout_seconds(name: str, raw_value: str) -> float:
    """Parse a positive timeout value expressed in seconds.

    Args:
        name: Setting name used in the error message.
        raw_value: Raw string from environment or command line.

    Returns:
        Parsed timeout in seconds.

    Raises:
        BulkCsvConfigError: If value is not a positive number.
    """
    try:
        seconds = float(raw_value)
    except ValueError as error:
        raise BulkCsvConfigError(
            f"Invalid {name} value: expected number of seconds, got '{raw_value}'. "
            f"Set {name} to a positive number."
        ) from error
    if seconds <= 0:
        raise BulkCsvConfigError(
            f"Invalid {name} value: expected a positive number of seconds, got {seconds}. "
            f"Set {name} to a value greater than zero."
        )
    return seconds


def _read_seconds(env_name: str, default: float) -> float:
    """Read an optional timeout variable."""
    raw_value = os.getenv(env_name)
    if raw_value is None:
        return default
    return parse_timeout_seconds(env_name, raw_value)


def _read_buffer_size(env_name: str, default: int) -> int:
    """Read an optional non-negative integer variable.

    Raises:
        BulkCsvConfigError: If value is not a non-negative integer.
    """
    raw_value = os.getenv(env_name)
    if raw_value is None:
        return default
    try:
        size = int(raw_value)
    except ValueError as error:
        raise BulkCsvConfigError(
            f"Invalid {env_name} value: expected integer, got '{raw_value}'. "
            f"Set {env_name} to a numeric value."
        ) from error
    if size < 0:
        raise BulkCsvConfigError(
            f"Invalid {env_name} value: expected zero or more, got {size}."
        )
    return size
