"""Result Merger — Unions per-field result batches into one ranked list."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from typeahead.models.record import FieldAccessor


def sort_key(value: Any) -> tuple[bool, Any]:
    """Ascending natural ordering with ``None`` first."""
    return (value is not None, value)


def dedupe(records: Iterable[FieldAccessor]) -> list[FieldAccessor]:
    """Drop records whose identifier was already seen, keeping first occurrences."""
    seen: set[Any] = set()
    unique: list[FieldAccessor] = []
    for record in records:
        if record.identifier in seen:
            continue
        seen.add(record.identifier)
        unique.append(record)
    return unique


def merge_batches(
    batches: Sequence[Sequence[FieldAccessor]],
    sort_field: str,
    limit: int,
) -> list[FieldAccessor]:
    """Concatenate, dedupe, sort by ``sort_field`` and keep the first ``limit``.

    Args:
        batches: Result batches in query order.
        sort_field: Field whose value orders the merged records.
        limit: Maximum number of records kept.

    Returns:
        At most ``limit`` unique records in ascending ``sort_field`` order.
    """
    unique = dedupe(record for batch in batches for record in batch)
    unique.sort(key=lambda record: sort_key(record.get(sort_field)))
    return unique[:limit]
