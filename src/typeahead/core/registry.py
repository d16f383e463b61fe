"""Endpoint Registry — Binds (entity, fields, options) triples to named endpoints.

The host application creates one registry during its startup, hands it the
backends it uses, and registers endpoints explicitly. Registration resolves
and validates the query plan immediately, so configuration errors surface
before any search runs.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from typeahead.backends.base.adapter import (
    Backend,
    BackendHealth,
    FullTextBackend,
    PersistenceBackend,
    RelationResolver,
)
from typeahead.backends.base.catalog import SchemaCatalog
from typeahead.core.conditions import build_conditions
from typeahead.core.endpoint import Endpoint
from typeahead.core.renderer import Transform
from typeahead.core.resolver import (
    DEFAULT_DELIMITER,
    DEFAULT_LIMIT,
    coerce_options,
    default_handler_name,
    normalize_fields,
    resolve_plan,
)
from typeahead.exceptions import ConfigurationError, EndpointNotFoundError
from typeahead.models.plan import AutocompleteOptions, FullTextStrategy, RelationalStrategy

logger = logging.getLogger(__name__)


class EndpointRegistry:
    """Registry of autocomplete endpoints and the backends they query.

    Example:
        >>> registry = EndpointRegistry(persistence=InMemoryBackend(tables))
        >>> await registry.initialize()
        >>> endpoint = registry.register("user", ["first_name", "last_name"], {"delimiter": ","})
        >>> await registry.get("auto_complete_for_user_first_name_last_name").complete("ja")
    """

    def __init__(
        self,
        *,
        persistence: PersistenceBackend | None = None,
        full_text: FullTextBackend | None = None,
        catalog: RelationResolver | None = None,
        default_limit: int = DEFAULT_LIMIT,
        default_delimiter: str = DEFAULT_DELIMITER,
        max_concurrent_queries: int = 5,
    ) -> None:
        self.persistence = persistence
        self.full_text = full_text
        self.catalog = catalog or SchemaCatalog()
        self.default_limit = default_limit
        self.default_delimiter = default_delimiter
        self.max_concurrent_queries = max_concurrent_queries
        self.collections: dict[str, list[Any]] = {}
        self._endpoints: dict[str, Endpoint] = {}

    # ── Backend lifecycle ────────────────────────────────────────────────

    @property
    def backends(self) -> dict[str, Backend]:
        """Configured backends keyed by name."""
        backends: dict[str, Backend] = {}
        for backend in (self.persistence, self.full_text):
            if backend is not None:
                backends[backend.name] = backend
        return backends

    async def initialize(self) -> None:
        """Initialize every configured backend."""
        for name, backend in self.backends.items():
            await backend.initialize()
            logger.info("Initialized backend: %s", name)

    async def shutdown(self) -> None:
        """Shut down every configured backend."""
        for name, backend in self.backends.items():
            try:
                await backend.shutdown()
                logger.info("Shut down backend: %s", name)
            except Exception:
                logger.warning("Error shutting down backend: %s", name, exc_info=True)

    async def health_check_all(self) -> dict[str, BackendHealth]:
        """Run health checks on all configured backends."""
        results: dict[str, BackendHealth] = {}
        for name, backend in self.backends.items():
            try:
                results[name] = await backend.health_check()
            except Exception as e:
                results[name] = BackendHealth(status="unhealthy", message=str(e))
        return results

    # ── Collections ──────────────────────────────────────────────────────

    def add_collection(self, name: str, items: Iterable[Any]) -> None:
        """Make an in-memory collection available to collection endpoints."""
        self.collections[name] = list(items)

    # ── Endpoints ────────────────────────────────────────────────────────

    def register(
        self,
        entity: str,
        fields: str | Sequence[str],
        options: AutocompleteOptions | Mapping[str, Any] | None = None,
        *,
        transform: Transform | None = None,
    ) -> Endpoint:
        """Register an autocomplete endpoint.

        Args:
            entity: Entity type searched.
            fields: A field name or ordered list of field names.
            options: Endpoint options (``limit``, ``order``, ``delimiter``,
                ``associations``, ``collection_source``, ``collection_filter_by``,
                ``full_text_fields``, ``handler_name``, ``primary_key``).
            transform: Replaces default rendering; receives the result list.

        Returns:
            The registered endpoint.

        Raises:
            ConfigurationError: If the options conflict, a relation is unknown,
                or the backend the endpoint needs is not configured.
        """
        opts = coerce_options(options)
        plan = resolve_plan(
            entity,
            fields,
            opts,
            self.catalog,
            default_limit=self.default_limit,
            default_delimiter=self.default_delimiter,
        )

        if isinstance(plan.strategy, RelationalStrategy):
            if self.persistence is None:
                raise ConfigurationError(f"Endpoint for '{entity}' needs a persistence backend")
            # Resolves every relation once so unknown ones fail here.
            build_conditions(plan, "", self.catalog)
        elif isinstance(plan.strategy, FullTextStrategy) and self.full_text is None:
            raise ConfigurationError(f"Endpoint for '{entity}' needs a full-text backend")

        name = opts.handler_name or default_handler_name(entity, normalize_fields(fields))
        if name in self._endpoints:
            logger.warning("Overwriting existing endpoint registration: %s", name)

        endpoint = Endpoint(name, plan, self, transform=transform)
        self._endpoints[name] = endpoint
        logger.info("Registered endpoint: %s (%s strategy)", name, plan.strategy.kind)
        return endpoint

    def get(self, name: str) -> Endpoint:
        """Get a registered endpoint by name.

        Raises:
            EndpointNotFoundError: If no endpoint has this name.
        """
        if name not in self._endpoints:
            raise EndpointNotFoundError(
                f"No endpoint registered with name '{name}'. "
                f"Available endpoints: {list(self._endpoints.keys())}"
            )
        return self._endpoints[name]

    async def complete(
        self,
        name: str,
        query: str | None,
        collections: Mapping[str, Iterable[Any]] | None = None,
    ) -> str:
        """Invoke the endpoint ``name`` and return its response body."""
        return await self.get(name).complete(query, collections)

    @property
    def endpoints(self) -> list[str]:
        """List all registered endpoint names."""
        return list(self._endpoints.keys())
