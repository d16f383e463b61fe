"""Search Strategy Selector — Picks and runs one of three search strategies.

Precedence, evaluated once when an endpoint is registered:
  1. ``collection_source`` set → filter an in-memory collection
  2. ``full_text_fields`` set → query the full-text backend
  3. otherwise → relational condition search (default)

The query string never influences which strategy runs, only its parameters.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from typeahead.backends.base.adapter import FullTextBackend, PersistenceBackend, RelationResolver
from typeahead.core.conditions import build_conditions
from typeahead.core.merger import merge_batches, sort_key
from typeahead.exceptions import ConfigurationError
from typeahead.models.plan import (
    ALL_FIELDS,
    AutocompleteOptions,
    CollectionStrategy,
    FullTextStrategy,
    QueryPlan,
    RelationalStrategy,
)
from typeahead.models.record import FieldAccessor, as_record

logger = logging.getLogger(__name__)


def select_strategy(
    options: AutocompleteOptions,
    primary_fields: Sequence[str],
) -> CollectionStrategy | FullTextStrategy | RelationalStrategy:
    """Resolve the strategy configured by ``options``."""
    if options.collection_source:
        return CollectionStrategy(
            source=options.collection_source,
            filter_by=options.collection_filter_by or primary_fields[0],
        )
    if options.full_text_fields is not None:
        if options.full_text_fields == ALL_FIELDS:
            return FullTextStrategy(search_fields=ALL_FIELDS)
        if not options.full_text_fields:
            raise ConfigurationError("full_text_fields must name at least one field or be 'all'")
        return FullTextStrategy(search_fields=tuple(options.full_text_fields))
    return RelationalStrategy()


# ── In-memory collections ────────────────────────────────────────────────


def filter_collection(
    items: Iterable[Any] | None,
    strategy: CollectionStrategy,
    query: str | None,
    limit: int,
    primary_key: str = "id",
) -> list[FieldAccessor]:
    """Return collection items whose filter field contains ``query``.

    Matching is a case-insensitive substring test. A missing collection
    yields no results. Matches are sorted ascending by the filter field and
    truncated to ``limit``.
    """
    if items is None:
        return []

    needle = (query or "").lower()
    records = [as_record(item, primary_key=primary_key) for item in items]
    matches = [r for r in records if needle in _text(r.get(strategy.filter_by)).lower()]
    matches.sort(key=lambda r: sort_key(r.get(strategy.filter_by)))
    return matches[:limit]


def _text(value: Any) -> str:
    return "" if value is None else str(value)


# ── Relational ───────────────────────────────────────────────────────────


async def search_relational(
    backend: PersistenceBackend,
    plan: QueryPlan,
    query: str | None,
    resolver: RelationResolver,
) -> list[FieldAccessor]:
    """Run a single condition search and cap the result at ``plan.limit``."""
    conditions = build_conditions(plan, query, resolver)
    logger.debug("Relational search on %s: %s", conditions.table, conditions.to_sql())
    records = await backend.search(
        conditions,
        order_by=plan.order_by,
        limit=plan.limit,
        extra_options=plan.extra_options,
    )
    return list(records)[: plan.limit]


# ── Full-text ────────────────────────────────────────────────────────────


async def search_full_text(
    backend: FullTextBackend,
    plan: QueryPlan,
    strategy: FullTextStrategy,
    query: str | None,
    max_concurrent: int = 5,
) -> list[FieldAccessor]:
    """Query the full-text backend.

    With ``'all'`` a single unrestricted query is returned as the backend
    ordered it. With a field list, one query per field runs concurrently and
    the batches are merged (deduped, sorted, truncated) when there is more
    than one. A single batch is returned unchanged. Every per-field query
    runs to completion before the first failure, if any, is raised.
    """
    text = query or ""
    if strategy.searches_all:
        return list(await backend.search(plan.entity, text, None, plan.limit, primary_key=plan.primary_key))

    semaphore = asyncio.Semaphore(max_concurrent)

    async def _search_field(field: str) -> list[Any]:
        async with semaphore:
            return list(await backend.search(plan.entity, text, field, plan.limit, primary_key=plan.primary_key))

    raw_batches: list[list[Any] | BaseException] = await asyncio.gather(
        *(_search_field(field) for field in strategy.search_fields),
        return_exceptions=True,
    )

    batches: list[list[Any]] = []
    for field, batch in zip(strategy.search_fields, raw_batches, strict=True):
        if isinstance(batch, BaseException):
            logger.warning("Full-text search on %s.%s failed: %s", plan.entity, field, batch)
            raise batch
        batches.append(batch)

    logger.debug(
        "Full-text search on %s returned %s records across %d fields",
        plan.entity,
        [len(batch) for batch in batches],
        len(batches),
    )
    if len(batches) > 1:
        return merge_batches(batches, plan.sort_field, plan.limit)
    return batches[0]


# ── Dispatch ─────────────────────────────────────────────────────────────


async def execute(
    plan: QueryPlan,
    query: str | None,
    *,
    resolver: RelationResolver,
    persistence: PersistenceBackend | None = None,
    full_text: FullTextBackend | None = None,
    collections: Mapping[str, Iterable[Any]] | None = None,
    max_concurrent: int = 5,
) -> list[FieldAccessor]:
    """Run the strategy selected for ``plan`` and return its final results.

    Raises:
        ConfigurationError: If the backend the strategy needs is missing.
        BackendError: If the backend fails.
    """
    match plan.strategy:
        case CollectionStrategy() as strategy:
            items = (collections or {}).get(strategy.source)
            if items is None:
                logger.debug("Collection '%s' not found, returning no results", strategy.source)
            return filter_collection(items, strategy, query, plan.limit, plan.primary_key)
        case FullTextStrategy() as strategy:
            if full_text is None:
                raise ConfigurationError(f"No full-text backend configured for entity '{plan.entity}'")
            return await search_full_text(full_text, plan, strategy, query, max_concurrent)
        case RelationalStrategy():
            if persistence is None:
                raise ConfigurationError(f"No persistence backend configured for entity '{plan.entity}'")
            return await search_relational(persistence, plan, query, resolver)
