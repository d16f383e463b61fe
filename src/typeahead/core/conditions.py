"""Condition Builder — Turns a ``QueryPlan`` and a query into a ``ConditionTree``.

One "contains" predicate is built per primary field, followed by one per
related field. All predicates are OR-combined, so a related-field match
qualifies a record even when none of its own fields match. Each predicate
binds the same parameter: the lowercased query wrapped in ``%`` wildcards.
"""

from __future__ import annotations

from typeahead.backends.base.adapter import RelationResolver
from typeahead.models.conditions import ConditionTree, Predicate
from typeahead.models.plan import QueryPlan


def like_parameter(query: str | None) -> str:
    """Return the bound ``LIKE`` parameter for ``query``."""
    return f"%{(query or '').lower()}%"


def build_conditions(plan: QueryPlan, query: str | None, resolver: RelationResolver) -> ConditionTree:
    """Build the condition tree for one relational search.

    Args:
        plan: The endpoint's query plan.
        query: Raw query string. ``None`` and ``""`` match every record.
        resolver: Relation metadata used to resolve related tables.

    Returns:
        Predicates, parameters, selection and joins for the search.

    Raises:
        ConfigurationError: If a configured relation does not exist.
    """
    table = resolver.table_for(plan.entity)
    predicates = [Predicate(table=table, field=field) for field in plan.primary_fields]

    for relation, fields in plan.related_fields.items():
        related_table = resolver.resolve(plan.entity, relation)
        predicates.extend(Predicate(table=related_table, field=field, relation=relation) for field in fields)

    parameter = like_parameter(query)
    selection = (f"{table}.{plan.primary_key}", *(p.qualified_name for p in predicates))

    return ConditionTree(
        entity=plan.entity,
        table=table,
        primary_key=plan.primary_key,
        predicates=tuple(predicates),
        parameters=(parameter,) * len(predicates),
        selection=selection,
        joins=tuple(plan.related_fields),
    )
