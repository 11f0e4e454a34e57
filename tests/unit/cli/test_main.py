"""Unit tests for CLI command handling."""

from __future__ import annotations

import pytest

from cli.main import main
from core.errors import BulkCsvConnectionError
from ingest import pipeline
from store import client_sdk
from tests.fakes import RecordingSink
from tests.fixture_paths import fixture_path


@pytest.fixture
def patched_sink(monkeypatch: pytest.MonkeyPatch) -> RecordingSink:
    sink = RecordingSink()
    monkeypatch.setattr(pipeline, "connect_mongo_sink", lambda *args, **kwargs: sink)
    monkeypatch.setattr(client_sdk, "connect_mongo_sink", lambda *args, **kwargs: sink)
    return sink


def test_cli_ingest_prints_summary(patched_sink: RecordingSink, capsys) -> None:
    """CLI ingest should print the run summary line on stdout."""
    exit_code = main(["ingest", "--csv-file", str(fixture_path("valid.csv"))])
    output = capsys.readouterr().out.strip()

    assert exit_code == 0
    assert output.splitlines()[-1] == "2 seen, 2 stored, 0 rejected"
    assert len(patched_sink.documents) == 2
    assert patched_sink.closed is True


def test_cli_ingest_counts_mismatched_rows(patched_sink: RecordingSink, capsys) -> None:
    """Row-level failures should still exit zero with the summary."""
    exit_code = main(["ingest", "--csv-file", str(fixture_path("mixed_widths.csv"))])
    output = capsys.readouterr().out.strip()

    assert exit_code == 0
    assert output.splitlines()[-1] == "2 seen, 0 stored, 2 rejected"
    assert patched_sink.attempts == 0


def test_cli_ingest_fails_for_missing_file(patched_sink: RecordingSink, capsys, tmp_path) -> None:
    """A missing input should exit non-zero with a diagnostic."""
    exit_code = main(
        ["ingest", "--csv-file", str(tmp_path / "missing.csv"), "--header-timeout", "2"]
    )
    captured = capsys.readouterr()

    assert exit_code == 1
    assert "error opening file" in captured.err
    assert patched_sink.documents == []


def test_cli_ingest_rejects_multi_character_delimiter(patched_sink: RecordingSink, capsys) -> None:
    exit_code = main(["ingest", "--csv-file", str(fixture_path("valid.csv")), "--delimiter", "::"])

    assert exit_code == 1
    assert "--delimiter" in capsys.readouterr().err


def test_cli_rejects_invalid_idle_timeout(patched_sink: RecordingSink, capsys) -> None:
    exit_code = main(["ingest", "--idle-timeout", "never"])

    assert exit_code == 1
    assert "--idle-timeout" in capsys.readouterr().err


def test_cli_ping_prints_ok(patched_sink: RecordingSink, capsys) -> None:
    """CLI ping should report a reachable server."""
    exit_code = main(["ping"])

    assert exit_code == 0
    assert capsys.readouterr().out.strip().splitlines()[-1] == "ok"


def test_cli_ping_reports_unreachable_server(monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    """An unreachable server should exit non-zero."""

    def refuse(*_args: object, **_kwargs: object) -> RecordingSink:
        raise BulkCsvConnectionError("could not ping MongoDB: refused")

    monkeypatch.setattr(client_sdk, "connect_mongo_sink", refuse)

    exit_code = main(["--mongo-uri", "mongodb://unreachable:1", "ping"])

    assert exit_code == 1
    assert "could not ping MongoDB" in capsys.readouterr().err
