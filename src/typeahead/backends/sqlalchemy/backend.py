"""SQLAlchemy backend — Relational autocomplete search through SQLAlchemy Core.

Compiles a ``ConditionTree`` into a single ``SELECT``::

    SELECT posts.id, posts.title, author.name AS author__name
    FROM posts LEFT OUTER JOIN authors AS author ON posts.author_id = author.id
    WHERE lower(posts.title) LIKE :p1 OR lower(author.name) LIKE :p2
    ORDER BY posts.title ASC
    LIMIT :n

Tables are addressed with lightweight ``table()``/``column()`` constructs, so
no reflection or ORM mapping is needed. Related tables are joined as
many-to-one relations described by the ``SchemaCatalog`` and aliased by
relation name.

Requires an async driver, e.g. ``postgresql+asyncpg://`` or
``sqlite+aiosqlite://``.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import ColumnElement, FromClause, Select, column, func, literal_column, or_, select, table, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from typeahead.backends.base.adapter import BackendHealth, PersistenceBackend
from typeahead.backends.base.catalog import SchemaCatalog
from typeahead.exceptions import ConnectionError, QueryError
from typeahead.models.conditions import ConditionTree
from typeahead.models.plan import OrderBy, SortDirection
from typeahead.models.record import Record

logger = logging.getLogger(__name__)

_SUPPORTED_OPTIONS = frozenset({"offset", "distinct"})
_RELATED_LABEL = "{relation}__{field}"
_ORDER_LABEL = "_order_{index}"


class SQLAlchemyBackend(PersistenceBackend):
    """Persistence backend for any database with an async SQLAlchemy dialect.

    Args:
        url: Database URL. Ignored when ``engine`` is given.
        engine: An existing ``AsyncEngine``. The backend does not dispose it.
        catalog: Schema catalog describing relations used in joins.
        echo: Log emitted SQL.
        **engine_kwargs: Extra keyword arguments for ``create_async_engine``.
    """

    def __init__(
        self,
        url: str | None = None,
        *,
        engine: AsyncEngine | None = None,
        catalog: SchemaCatalog | None = None,
        echo: bool = False,
        **engine_kwargs: Any,
    ) -> None:
        self._url = url
        self._engine = engine
        self._owns_engine = engine is None
        self._catalog = catalog or SchemaCatalog()
        self._echo = echo
        self._engine_kwargs = engine_kwargs

    @property
    def name(self) -> str:
        return "sqlalchemy"

    async def initialize(self) -> None:
        """Create the engine (unless one was supplied) and verify connectivity."""
        if self._engine is None:
            if not self._url:
                raise ConnectionError("SQLAlchemy backend needs a database URL or an engine.")
            self._engine = create_async_engine(self._url, echo=self._echo, **self._engine_kwargs)

        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            logger.info("Connected to database: %s", self._engine.url.render_as_string(hide_password=True))
        except SQLAlchemyError as e:
            raise ConnectionError(f"Failed to connect to database: {e}") from e

    async def shutdown(self) -> None:
        """Dispose the engine if this backend created it."""
        if self._engine is not None and self._owns_engine:
            await self._engine.dispose()
            self._engine = None

    # ── Statement building ───────────────────────────────────────────────

    def build_statement(
        self,
        conditions: ConditionTree,
        *,
        order_by: Sequence[OrderBy],
        limit: int,
        extra_options: dict[str, Any] | None = None,
    ) -> Select[Any]:
        """Compile ``conditions`` into a SQLAlchemy ``Select``.

        Raises:
            QueryError: If an extra option is unsupported.
            ConfigurationError: If a joined relation is not in the catalog.
        """
        options = dict(extra_options or {})
        unsupported = set(options) - _SUPPORTED_OPTIONS
        if unsupported:
            raise QueryError(f"Unsupported query options for SQLAlchemy backend: {sorted(unsupported)}")

        base_columns = {conditions.primary_key}
        base_columns.update(p.field for p in conditions.predicates if p.relation is None)
        related_columns: dict[str, set[str]] = {relation: set() for relation in conditions.joins}
        for p in conditions.predicates:
            if p.relation is not None:
                related_columns.setdefault(p.relation, set()).add(p.field)

        relations = {relation: self._catalog.relation(conditions.entity, relation) for relation in related_columns}
        base_columns.update(r.foreign_key for r in relations.values())

        for clause in order_by:
            order_table, _, order_field = clause.field.rpartition(".")
            if not order_table or order_table == conditions.table:
                base_columns.add(order_field)
                continue
            for relation, cfg in relations.items():
                if cfg.table == order_table:
                    related_columns[relation].add(order_field)
                    break

        base = table(conditions.table, *(column(c) for c in sorted(base_columns)))
        aliases: dict[str, FromClause] = {}
        joined: FromClause = base
        for relation, cfg in relations.items():
            names = related_columns[relation] | {cfg.references}
            alias = table(cfg.table, *(column(c) for c in sorted(names))).alias(relation)
            aliases[relation] = alias
            joined = joined.outerjoin(alias, base.c[cfg.foreign_key] == alias.c[cfg.references])

        selected: dict[str, ColumnElement[Any]] = {conditions.primary_key: base.c[conditions.primary_key]}
        matches: list[ColumnElement[bool]] = []
        for predicate, parameter in conditions.bound():
            if predicate.relation is None:
                col = base.c[predicate.field]
                label = predicate.field
            else:
                col = aliases[predicate.relation].c[predicate.field]
                label = _RELATED_LABEL.format(relation=predicate.relation, field=predicate.field)
            selected.setdefault(label, col.label(label))
            matches.append(func.lower(col).like(parameter))

        order_columns = [self._order_column(clause, conditions, base, relations, aliases) for clause in order_by]
        distinct = bool(options.get("distinct"))
        if distinct:
            # SELECT DISTINCT requires every ORDER BY expression in the select list.
            for i, col in enumerate(order_columns):
                label = _ORDER_LABEL.format(index=i)
                selected[label] = col.label(label)

        stmt = select(*selected.values()).select_from(joined).where(or_(*matches))
        stmt = stmt.order_by(
            *(
                col.desc() if clause.direction == SortDirection.DESC else col.asc()
                for clause, col in zip(order_by, order_columns, strict=True)
            )
        )
        stmt = stmt.limit(limit)
        if options.get("offset"):
            stmt = stmt.offset(int(options["offset"]))
        if distinct:
            stmt = stmt.distinct()
        return stmt

    @staticmethod
    def _order_column(
        order_by: OrderBy,
        conditions: ConditionTree,
        base: FromClause,
        relations: dict[str, Any],
        aliases: dict[str, FromClause],
    ) -> ColumnElement[Any]:
        order_table, _, order_field = order_by.field.rpartition(".")
        if not order_table or order_table == conditions.table:
            return base.c[order_field]
        relation = next((name for name, cfg in relations.items() if cfg.table == order_table), None)
        if relation is not None and order_field in aliases[relation].c:
            return aliases[relation].c[order_field]
        return literal_column(order_by.field)

    # ── Search ───────────────────────────────────────────────────────────

    async def search(
        self,
        conditions: ConditionTree,
        *,
        order_by: Sequence[OrderBy],
        limit: int,
        extra_options: dict[str, Any] | None = None,
    ) -> list[Record]:
        """Execute the compiled statement and map rows to ``Record``."""
        if self._engine is None:
            raise ConnectionError("SQLAlchemy engine not initialized.")

        stmt = self.build_statement(conditions, order_by=order_by, limit=limit, extra_options=extra_options)
        try:
            async with self._engine.connect() as conn:
                result = await conn.execute(stmt)
                rows = result.mappings().all()
        except SQLAlchemyError as e:
            raise QueryError(f"Database query failed: {e}") from e

        return [self._to_record(row, conditions) for row in rows]

    @staticmethod
    def _to_record(row: Any, conditions: ConditionTree) -> Record:
        attributes = {conditions.primary_key: row[conditions.primary_key]}
        related: dict[str, dict[str, Any] | None] = {relation: {} for relation in conditions.joins}
        for predicate in conditions.predicates:
            if predicate.relation is None:
                attributes[predicate.field] = row[predicate.field]
            else:
                label = _RELATED_LABEL.format(relation=predicate.relation, field=predicate.field)
                related[predicate.relation][predicate.field] = row[label]  # type: ignore[index]
        return Record(id=row[conditions.primary_key], attributes=attributes, related=related)

    # ── Health ───────────────────────────────────────────────────────────

    async def health_check(self) -> BackendHealth:
        """Run ``SELECT 1`` and report latency."""
        if self._engine is None:
            return BackendHealth(status="unhealthy", message="Engine not initialized")

        try:
            start = time.monotonic()
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return BackendHealth(
                status="healthy",
                latency_ms=int((time.monotonic() - start) * 1000),
                last_check=datetime.now(UTC).isoformat(),
                message=f"Dialect: {self._engine.dialect.name}",
            )
        except Exception as e:
            return BackendHealth(status="unhealthy", message=str(e))
