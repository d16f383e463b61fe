"""Plan Resolver — Normalizes endpoint configuration into a ``QueryPlan``.

Rules:
  - A single field name becomes a one-element field list
  - ``collection_source`` cannot be combined with several fields, nor with
    ``full_text_fields``
  - ``order`` is a comma-separated list of clauses and defaults to the first
    field ascending
  - ``delimiter`` defaults to a single space, ``limit`` to 10
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from typeahead.backends.base.adapter import RelationResolver
from typeahead.core.strategy import select_strategy
from typeahead.exceptions import ConfigurationError
from typeahead.models.plan import AutocompleteOptions, OrderBy, QueryPlan, SortDirection

DEFAULT_LIMIT = 10
DEFAULT_DELIMITER = " "


def normalize_fields(fields: str | Sequence[str]) -> tuple[str, ...]:
    """Return ``fields`` as a tuple, wrapping a single name."""
    if isinstance(fields, str):
        return (fields,)
    return tuple(fields)


def parse_order_clause(clause: str) -> OrderBy:
    """Parse a single ordering clause such as ``"last_name DESC"``.

    Raises:
        ConfigurationError: If the clause is empty or has an unknown direction.
    """
    parts = clause.split()
    if not parts or len(parts) > 2:
        raise ConfigurationError(f"Invalid order clause: '{clause}'")
    if len(parts) == 1:
        return OrderBy(field=parts[0])
    try:
        direction = SortDirection(parts[1].upper())
    except ValueError as e:
        raise ConfigurationError(f"Invalid sort direction in order clause: '{clause}'") from e
    return OrderBy(field=parts[0], direction=direction)


def parse_order(order: str) -> tuple[OrderBy, ...]:
    """Parse a comma-separated ordering such as ``"last_name ASC, first_name ASC"``.

    Raises:
        ConfigurationError: If any clause is invalid.
    """
    return tuple(parse_order_clause(clause) for clause in order.split(","))


def coerce_options(options: AutocompleteOptions | Mapping[str, Any] | None) -> AutocompleteOptions:
    """Validate a raw option mapping into ``AutocompleteOptions``."""
    if isinstance(options, AutocompleteOptions):
        return options
    try:
        return AutocompleteOptions.model_validate(dict(options or {}))
    except ValidationError as e:
        raise ConfigurationError(f"Invalid autocomplete options: {e}") from e


def default_handler_name(entity: str, fields: Sequence[str]) -> str:
    return f"auto_complete_for_{entity}_{'_'.join(fields)}"


def resolve_plan(
    entity: str,
    fields: str | Sequence[str],
    options: AutocompleteOptions | Mapping[str, Any] | None = None,
    catalog: RelationResolver | None = None,
    *,
    default_limit: int = DEFAULT_LIMIT,
    default_delimiter: str = DEFAULT_DELIMITER,
) -> QueryPlan:
    """Build the canonical ``QueryPlan`` for one endpoint.

    Args:
        entity: Entity type searched.
        fields: A field name or ordered list of field names.
        options: Raw endpoint options.
        catalog: Supplies the default primary key of ``entity``.
        default_limit: Limit used when ``options`` has none.
        default_delimiter: Delimiter used when ``options`` has none.

    Returns:
        The validated query plan.

    Raises:
        ConfigurationError: On empty fields or conflicting options.
    """
    opts = coerce_options(options)

    if opts.collection_source and not isinstance(fields, str) and len(fields) > 1:
        raise ConfigurationError("A field list cannot be combined with the collection_source option")
    if opts.collection_source and opts.full_text_fields is not None:
        raise ConfigurationError("collection_source and full_text_fields cannot be combined")

    primary_fields = normalize_fields(fields)
    if not primary_fields:
        raise ConfigurationError(f"At least one field is required for entity '{entity}'")

    related_fields = {
        relation: normalize_fields(related)
        for relation, related in (opts.associations or {}).items()
    }

    strategy = select_strategy(opts, primary_fields)

    primary_key = opts.primary_key or (catalog.primary_key(entity) if catalog else "id")

    return QueryPlan(
        entity=entity,
        primary_fields=primary_fields,
        related_fields=related_fields,
        delimiter=opts.delimiter if opts.delimiter is not None else default_delimiter,
        order_by=parse_order(opts.order) if opts.order else (OrderBy(field=primary_fields[0]),),
        limit=opts.limit or default_limit,
        primary_key=primary_key,
        strategy=strategy,
        extra_options=opts.extra_options,
    )
