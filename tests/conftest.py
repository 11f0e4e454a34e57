"""Pytest configuration for repository test runs."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from core.config import BulkCsvConfig
from tests.fakes import RecordingLogger, RecordingSink


def pytest_sessionstart() -> None:
    """Add src directory to sys.path for test imports."""
    project_root = Path(__file__).resolve().parent.parent
    src_path = project_root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


@pytest.fixture
def recording_logger() -> RecordingLogger:
    """Logger capturing structured events in memory."""
    return RecordingLogger()


@pytest.fixture
def recording_sink() -> RecordingSink:
    """Sink accepting every document."""
    return RecordingSink()


@pytest.fixture
def fast_config() -> BulkCsvConfig:
    """Config with short timeouts so failure paths finish quickly."""
    return BulkCsvConfig(header_timeout_seconds=2.0, idle_timeout_seconds=2.0)
