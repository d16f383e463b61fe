"""In-memory backends — Process-local persistence and full-text search.

Useful for tests, fixtures and small static datasets. Records are stored per
entity name. The persistence backend evaluates ``ConditionTree`` predicates
with SQL ``LIKE`` semantics; the full-text backend does case-insensitive
prefix matching on word tokens.

Usage::

    backend = InMemoryBackend({
        "user": [Record(id=1, attributes={"first_name": "Jane", "last_name": "Doe"})],
    })
    records = await backend.search(conditions, order_by=[OrderBy(field="first_name")], limit=10)
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from typeahead.backends.base.adapter import FullTextBackend, PersistenceBackend
from typeahead.core.merger import sort_key
from typeahead.exceptions import QueryError
from typeahead.models.conditions import ConditionTree, Predicate
from typeahead.models.plan import OrderBy, SortDirection
from typeahead.models.record import Record

_SUPPORTED_OPTIONS = frozenset({"offset"})
_TOKEN_RE = re.compile(r"\w+")


def like_to_regex(pattern: str) -> re.Pattern[str]:
    """Compile a SQL ``LIKE`` pattern (``%`` and ``_`` wildcards) to a regex."""
    parts = []
    for char in pattern:
        if char == "%":
            parts.append(".*")
        elif char == "_":
            parts.append(".")
        else:
            parts.append(re.escape(char))
    return re.compile("".join(parts), re.DOTALL)


class InMemoryBackend(PersistenceBackend):
    """Persistence backend over lists of ``Record`` keyed by entity name.

    Args:
        tables: Records per entity name.
    """

    def __init__(self, tables: Mapping[str, Iterable[Record]] | None = None) -> None:
        self._tables: dict[str, list[Record]] = {entity: list(rows) for entity, rows in (tables or {}).items()}

    @property
    def name(self) -> str:
        return "memory"

    def add(self, entity: str, records: Iterable[Record]) -> None:
        self._tables.setdefault(entity, []).extend(records)

    async def search(
        self,
        conditions: ConditionTree,
        *,
        order_by: Sequence[OrderBy],
        limit: int,
        extra_options: dict[str, Any] | None = None,
    ) -> list[Record]:
        options = dict(extra_options or {})
        unsupported = set(options) - _SUPPORTED_OPTIONS
        if unsupported:
            raise QueryError(f"Unsupported query options for memory backend: {sorted(unsupported)}")

        matchers = [(predicate, like_to_regex(param)) for predicate, param in conditions.bound()]
        rows = [
            row
            for row in self._tables.get(conditions.entity, [])
            if any(_matches(_value(row, predicate), regex) for predicate, regex in matchers)
        ]

        # Stable sorts from the last clause to the first apply the clauses in turn.
        for clause in reversed(order_by):
            rows.sort(
                key=lambda row: sort_key(self._order_value(row, conditions, clause)),
                reverse=clause.direction == SortDirection.DESC,
            )
        offset = int(options.get("offset", 0))
        return rows[offset : offset + limit]

    @staticmethod
    def _order_value(row: Record, conditions: ConditionTree, order_by: OrderBy) -> Any:
        table, _, field = order_by.field.rpartition(".")
        if not table or table == conditions.table:
            return row.get(field)
        for predicate in conditions.predicates:
            if predicate.table == table and predicate.relation:
                related = row.relation(predicate.relation)
                return related.get(field) if related is not None else None
        raise QueryError(f"Cannot order by '{order_by.field}': table '{table}' is not joined")


class InMemoryFullTextBackend(FullTextBackend):
    """Full-text backend matching query words as prefixes of field tokens.

    Every word of the query must prefix-match some token of the searched
    field (or of any field when unrestricted). An empty query matches all
    records. Results keep insertion order. Stored records already carry their
    identifier, so ``primary_key`` is not consulted.

    Args:
        documents: Records per entity name.
    """

    def __init__(self, documents: Mapping[str, Iterable[Record]] | None = None) -> None:
        self._documents: dict[str, list[Record]] = {
            entity: list(rows) for entity, rows in (documents or {}).items()
        }

    @property
    def name(self) -> str:
        return "memory_full_text"

    async def search(
        self,
        entity: str,
        query: str,
        field: str | None,
        per_page: int,
        *,
        primary_key: str = "id",
    ) -> list[Record]:
        words = _TOKEN_RE.findall(query.lower())
        matches = []
        for record in self._documents.get(entity, []):
            values = [record.get(field)] if field is not None else list(record.attributes.values())
            tokens = [t for v in values for t in _TOKEN_RE.findall(_lower(v))]
            if all(any(token.startswith(word) for token in tokens) for word in words):
                matches.append(record)
            if len(matches) >= per_page:
                break
        return matches


def _value(row: Record, predicate: Predicate) -> Any:
    if predicate.relation is None:
        return row.get(predicate.field)
    related = row.relation(predicate.relation)
    return related.get(predicate.field) if related is not None else None


def _matches(value: Any, regex: re.Pattern[str]) -> bool:
    # NULL never matches LIKE, not even "%%".
    return value is not None and regex.fullmatch(str(value).lower()) is not None


def _lower(value: Any) -> str:
    return "" if value is None else str(value).lower()
