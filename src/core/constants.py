"""Core constants used across bulkcsv modules.

This module centralizes defaults for configuration and the pipeline.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

DEFAULT_CSV_FILE = "input.csv"
DEFAULT_MONGO_URI = "mongodb://localhost:27017"
DEFAULT_DATABASE_NAME = "bulkcsv"
DEFAULT_COLLECTION_NAME = "processed_data"
DEFAULT_DELIMITER = ","
DEFAULT_QUOTE_CHAR = "\""
DEFAULT_SOURCE_ENCODING = "utf-8-sig"
DEFAULT_HEADER_TIMEOUT_SECONDS = 10.0
DEFAULT_IDLE_TIMEOUT_SECONDS = 30.0
DEFAULT_CONNECT_TIMEOUT_SECONDS = 10.0
DEFAULT_STORE_TIMEOUT_SECONDS = 5.0
DEFAULT_ERROR_BUFFER_SIZE = 10
DEFAULT_LOG_LEVEL = "INFO"
SUPPORTED_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
RECORD_SOURCE_THREAD_NAME = "bulkcsv-record-source"
