"""Renderer — Serializes results into the line format read by autocomplete widgets.

Each record becomes one line::

    <value1><delimiter>...<delimiter><valueN>|<identifier>

Primary field values come first, then related field values, both in
configured order. Lines are separated by ``\\n``.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

from typeahead.models.plan import QueryPlan
from typeahead.models.record import FieldAccessor

Transform = Callable[[list[FieldAccessor]], str]


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def render_line(record: FieldAccessor, plan: QueryPlan) -> str:
    """Render a single record."""
    values = [record.get(field) for field in plan.primary_fields]
    for relation, fields in plan.related_fields.items():
        related = record.relation(relation)
        values.extend(related.get(field) if related is not None else None for field in fields)
    return f"{plan.delimiter.join(_text(v) for v in values)}|{_text(record.identifier)}"


def render(
    records: Sequence[FieldAccessor],
    plan: QueryPlan,
    transform: Transform | None = None,
) -> str:
    """Render ``records`` as the response body.

    Args:
        records: Final, ranked results.
        plan: Supplies fields, related fields and delimiter.
        transform: Replaces default rendering entirely when given; receives
            the full result list.

    Returns:
        The response body. Empty when there are no records.
    """
    if transform is not None:
        return transform(list(records))
    return "\n".join(render_line(record, plan) for record in records)
