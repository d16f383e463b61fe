"""Autocomplete endpoint — One registered (entity, fields, options) binding."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from typeahead.core.renderer import Transform, render
from typeahead.core.strategy import execute
from typeahead.models.plan import QueryPlan
from typeahead.models.record import FieldAccessor

if TYPE_CHECKING:
    from typeahead.core.registry import EndpointRegistry

logger = logging.getLogger(__name__)


class Endpoint:
    """A callable autocomplete endpoint.

    Holds the immutable plan resolved at registration and borrows backends
    from its registry on each call.

    Attributes:
        name: Handler name the endpoint is registered under.
        plan: Query plan resolved at registration.
        transform: Optional replacement for default rendering.
    """

    def __init__(
        self,
        name: str,
        plan: QueryPlan,
        registry: EndpointRegistry,
        transform: Transform | None = None,
    ) -> None:
        self.name = name
        self.plan = plan
        self.transform = transform
        self._registry = registry

    async def search(
        self,
        query: str | None,
        collections: Mapping[str, Iterable[Any]] | None = None,
    ) -> list[FieldAccessor]:
        """Return the final, ranked results for ``query``.

        Args:
            query: Raw query string; empty or ``None`` matches everything.
            collections: Per-call in-memory collections. They take precedence
                over collections added to the registry.
        """
        merged = dict(self._registry.collections)
        if collections:
            merged.update(collections)

        return await execute(
            self.plan,
            query,
            resolver=self._registry.catalog,
            persistence=self._registry.persistence,
            full_text=self._registry.full_text,
            collections=merged,
            max_concurrent=self._registry.max_concurrent_queries,
        )

    async def complete(
        self,
        query: str | None,
        collections: Mapping[str, Iterable[Any]] | None = None,
    ) -> str:
        """Search and render the response body for ``query``."""
        start = time.monotonic()
        records = await self.search(query, collections)
        body = render(records, self.plan, self.transform)
        logger.debug(
            "Endpoint %s answered %r with %d records in %d ms",
            self.name,
            query,
            len(records),
            int((time.monotonic() - start) * 1000),
        )
        return body

    async def __call__(
        self,
        query: str | None,
        collections: Mapping[str, Iterable[Any]] | None = None,
    ) -> str:
        return await self.complete(query, collections)

    def __repr__(self) -> str:
        return f"Endpoint(name={self.name!r}, entity={self.plan.entity!r}, strategy={self.plan.strategy.kind!r})"
