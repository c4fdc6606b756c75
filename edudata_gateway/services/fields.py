"""Field selection: restrict records to a caller-chosen subset of keys."""

from collections.abc import Mapping, Sequence
from typing import Any

from edudata_gateway.core.exceptions import FieldSelectionError


def validate_field_names(fields: Sequence[str] | None, sample_record: Mapping[str, Any]) -> None:
    """Raise FieldSelectionError if any requested field is not a key of sample_record."""
    if not fields:
        return
    available = list(sample_record.keys())
    invalid = [f for f in fields if f not in sample_record]
    if invalid:
        raise FieldSelectionError(invalid_fields=invalid, available_fields=available)


def select_fields(
    records: list[dict[str, Any]],
    fields: Sequence[str] | None = None,
) -> list[dict[str, Any]]:
    """
    Project each record onto `fields`, in the caller's order.

    No fields (None or empty) returns `records` unchanged. Keys missing from a
    particular record are skipped rather than raising.
    """
    if not fields:
        return records
    return [{f: record[f] for f in fields if f in record} for record in records]
