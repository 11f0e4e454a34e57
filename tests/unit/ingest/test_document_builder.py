"""Unit tests for row-to-document transformation."""

from __future__ import annotations

import pytest

from core.errors import BulkCsvTransformError
from ingest.document_builder import build_document


def test_build_document_zips_header_and_row() -> None:
    """Document should pair names and values by position."""
    document = build_document(["A", "B"], ["x", "y"])

    assert document == {"A": "x", "B": "y"}


def test_build_document_keeps_empty_strings() -> None:
    """Empty values should stay empty text, not be dropped or coerced."""
    document = build_document(("ID", "Name", "Value"), ("", "EmptyWidget", ""))

    assert document == {"ID": "", "Name": "EmptyWidget", "Value": ""}


def test_build_document_accepts_empty_header_and_row() -> None:
    assert build_document([], []) == {}


def test_build_document_rejects_length_mismatch() -> None:
    """Mismatched lengths should fail instead of truncating or padding."""
    with pytest.raises(BulkCsvTransformError) as error_info:
        build_document(["ID", "Name"], ["123"])

    assert str(error_info.value) == (
        "header length (2) and record length (1) must match for transformation"
    )
