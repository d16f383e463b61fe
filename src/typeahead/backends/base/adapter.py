"""Base backend interfaces — Abstract classes for autocomplete data sources.

The engine talks to three kinds of collaborators:
  1. ``PersistenceBackend`` executes a relational ``ConditionTree``
  2. ``FullTextBackend`` runs keyword queries against a full-text index
  3. ``RelationResolver`` maps entity/relation names to table identifiers

Backends share a small lifecycle (``initialize``/``shutdown``/``health_check``)
managed by ``EndpointRegistry``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from pydantic import BaseModel, Field

from typeahead.models.conditions import ConditionTree
from typeahead.models.plan import OrderBy
from typeahead.models.record import Record


class BackendHealth(BaseModel):
    """Health status of a backend."""

    status: str = Field(description="Health status: healthy, degraded, unhealthy")
    latency_ms: int = Field(default=0, description="Latency of last health check in ms")
    last_check: str | None = Field(default=None, description="ISO timestamp of last health check")
    message: str | None = Field(default=None, description="Additional health message")


class Backend(ABC):
    """Lifecycle shared by all backends.

    Backends should be stateless between calls. Connection pools and
    clients are created in ``initialize()`` and released in ``shutdown()``.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique backend name (e.g., 'sqlalchemy', 'meilisearch')."""

    async def initialize(self) -> None:
        """Initialize the backend (connections, pools, etc.)."""

    async def shutdown(self) -> None:
        """Release resources held by the backend."""

    async def health_check(self) -> BackendHealth:
        """Report backend health. Defaults to healthy for local backends."""
        return BackendHealth(status="healthy")


class PersistenceBackend(Backend):
    """Executes case-insensitive substring searches described by a ``ConditionTree``."""

    @abstractmethod
    async def search(
        self,
        conditions: ConditionTree,
        *,
        order_by: Sequence[OrderBy],
        limit: int,
        extra_options: dict[str, Any] | None = None,
    ) -> list[Record]:
        """Return records matching any predicate of ``conditions``.

        Args:
            conditions: Predicates, bound parameters, selection and joins.
            order_by: Ordering clauses, applied in turn.
            limit: Maximum number of records.
            extra_options: Backend-specific options (e.g. ``offset``).

        Returns:
            Matching records, ordered by ``order_by``.

        Raises:
            QueryError: If the query is malformed or an option is unsupported.
        """


class FullTextBackend(Backend):
    """Runs keyword queries against a full-text index."""

    @abstractmethod
    async def search(
        self,
        entity: str,
        query: str,
        field: str | None,
        per_page: int,
        *,
        primary_key: str = "id",
    ) -> list[Record]:
        """Search the index of ``entity``.

        Args:
            entity: Entity type whose index is searched.
            query: The raw query string.
            field: Restrict matching to this field, or ``None`` for all indexed fields.
            per_page: Maximum number of records.
            primary_key: Document field holding the record identifier.

        Returns:
            Matching records in backend relevance order.
        """


class RelationResolver(ABC):
    """Resolves entity and relation names to table identifiers."""

    @abstractmethod
    def table_for(self, entity: str) -> str:
        """Return the table identifier of ``entity``."""

    @abstractmethod
    def primary_key(self, entity: str) -> str:
        """Return the identifier column of ``entity``."""

    @abstractmethod
    def resolve(self, entity: str, relation: str) -> str:
        """Return the table identifier of ``relation`` on ``entity``.

        Raises:
            ConfigurationError: If ``entity`` has no such relation.
        """
