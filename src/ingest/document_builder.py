"""Row-to-document transformation.

Documents are a positional zip of header names and row values. Values
stay opaque text; no coercion or trimming is applied.
"""

from __future__ import annotations

from typing import Sequence

from core.errors import BulkCsvTransformError
from core.types import Document


def build_document(header: Sequence[str], fields: Sequence[str]) -> Document:
    """Pair header names with row values by position.

    Args:
        header: Field names from the first input line.
        fields: Field values of one row.

    Returns:
        Mapping from field name to value. A repeated header name keeps
        the value of its last column.

    Raises:
        BulkCsvTransformError: If header and row lengths differ.
    """
    if len(header) != len(fields):
        raise BulkCsvTransformError(
            f"header length ({len(header)}) and record length ({len(fields)}) "
            "must match for transformation"
        )
    return dict(zip(header, fields))
