"""Unit tests for core config parsing."""

from __future__ import annotations

import pytest

from core.config import BulkCsvConfig, parse_timeout_seconds
from core.errors import BulkCsvConfigError

_ENV_NAMES = (
    "BULKCSV_CSV_FILE",
    "BULKCSV_MONGO_URI",
    "BULKCSV_DB_NAME",
    "BULKCSV_COLLECTION_NAME",
    "BULKCSV_HEADER_TIMEOUT",
    "BULKCSV_IDLE_TIMEOUT",
    "BULKCSV_CONNECT_TIMEOUT",
    "BULKCSV_STORE_TIMEOUT",
    "BULKCSV_ERROR_BUFFER_SIZE",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_NAMES:
        monkeypatch.delenv(name, raising=False)


def test_from_env_uses_defaults() -> None:
    """Config should fall back to defaults for every unset variable."""
    config = BulkCsvConfig.from_env()

    assert config == BulkCsvConfig()
    assert (config.csv_file, config.mongo_uri, config.database_name, config.collection_name) == (
        "input.csv",
        "mongodb://localhost:27017",
        "bulkcsv",
        "processed_data",
    )
    assert (config.header_timeout_seconds, config.idle_timeout_seconds) == (10.0, 30.0)
    assert (config.connect_timeout_seconds, config.store_timeout_seconds) == (10.0, 5.0)
    assert config.error_buffer_size == 10


def test_from_env_reads_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should read destination and timeouts from environment."""
    monkeypatch.setenv("BULKCSV_MONGO_URI", "mongodb://db.internal:27017")
    monkeypatch.setenv("BULKCSV_DB_NAME", "warehouse")
    monkeypatch.setenv("BULKCSV_IDLE_TIMEOUT", "2.5")
    monkeypatch.setenv("BULKCSV_ERROR_BUFFER_SIZE", "0")

    config = BulkCsvConfig.from_env()

    assert config.mongo_uri == "mongodb://db.internal:27017"
    assert config.database_name == "warehouse"
    assert config.idle_timeout_seconds == 2.5
    assert config.error_buffer_size == 0


@pytest.mark.parametrize("raw_value", ["soon", "0", "-1"])
def test_from_env_raises_for_invalid_timeout(
    monkeypatch: pytest.MonkeyPatch,
    raw_value: str,
) -> None:
    """Config should reject non-numeric and non-positive timeouts."""
    monkeypatch.setenv("BULKCSV_HEADER_TIMEOUT", raw_value)

    with pytest.raises(BulkCsvConfigError, match="BULKCSV_HEADER_TIMEOUT"):
        BulkCsvConfig.from_env()


def test_from_env_raises_for_invalid_buffer_size(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should reject a non-integer error buffer size."""
    monkeypatch.setenv("BULKCSV_ERROR_BUFFER_SIZE", "ten")

    with pytest.raises(BulkCsvConfigError):
        BulkCsvConfig.from_env()


def test_parse_timeout_seconds_accepts_fractions() -> None:
    assert parse_timeout_seconds("--idle-timeout", "0.25") == 0.25
