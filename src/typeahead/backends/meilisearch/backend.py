"""MeiliSearch backend — Full-text autocomplete over MeiliSearch indexes.

MeiliSearch provides instant, typo-tolerant prefix search out of the box.
This backend communicates via the REST API using ``httpx``.

Each entity maps to one index (the entity name unless overridden). A field
restricted query sets ``attributesToSearchOn`` to that single field; an
unrestricted query searches every searchable attribute.

Usage::

    backend = MeiliSearchBackend(
        base_url="http://localhost:7700",
        indexes={"user": "users"},
        api_key="your-master-key",
    )
    await backend.initialize()
    records = await backend.search("user", "jan", "first_name", per_page=10)
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

import httpx

from typeahead.backends.base.adapter import BackendHealth, FullTextBackend
from typeahead.exceptions import ConnectionError, QueryError
from typeahead.models.record import Record

logger = logging.getLogger(__name__)


class MeiliSearchBackend(FullTextBackend):
    """Full-text backend for MeiliSearch.

    Communicates with MeiliSearch via its `REST API`_ over HTTP.

    .. _REST API: https://www.meilisearch.com/docs/reference/api/overview

    Args:
        base_url: MeiliSearch instance URL, e.g. ``"http://localhost:7700"``.
        indexes: Index UID per entity name. Unlisted entities use their name.
        api_key: Master key or API key for authentication.
        timeout: HTTP request timeout in seconds.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:7700",
        indexes: Mapping[str, str] | None = None,
        api_key: str | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._indexes = dict(indexes or {})
        self._api_key = api_key
        self._timeout = timeout
        self._client: httpx.AsyncClient | None = None

    @property
    def name(self) -> str:
        return "meilisearch"

    def index_for(self, entity: str) -> str:
        return self._indexes.get(entity, entity)

    async def initialize(self) -> None:
        """Create an ``httpx.AsyncClient`` and verify connection to MeiliSearch."""
        headers: dict[str, str] = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"

        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=httpx.Timeout(self._timeout),
            headers=headers,
        )

        try:
            resp = await self._client.get("/health")
            resp.raise_for_status()
            data = resp.json()
            if data.get("status") != "available":
                raise ConnectionError(f"MeiliSearch not available: {data}")
            logger.info("Connected to MeiliSearch at %s", self._base_url)
        except httpx.HTTPError as e:
            raise ConnectionError(f"Failed to connect to MeiliSearch: {e}") from e

    async def shutdown(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    # ── Search ───────────────────────────────────────────────────────────

    def build_payload(self, query: str, field: str | None, per_page: int) -> dict[str, Any]:
        """Build the ``/search`` request body."""
        payload: dict[str, Any] = {"q": query, "limit": per_page, "offset": 0}
        if field is not None:
            payload["attributesToSearchOn"] = [field]
        return payload

    async def search(
        self,
        entity: str,
        query: str,
        field: str | None,
        per_page: int,
        *,
        primary_key: str = "id",
    ) -> list[Record]:
        """Execute a query against the entity's index.

        Uses the ``/indexes/{index}/search`` endpoint. Each hit's identifier is
        read from ``primary_key``.
        """
        if not self._client:
            raise ConnectionError("MeiliSearch client not initialized.")

        index = self.index_for(entity)
        try:
            resp = await self._client.post(
                f"/indexes/{index}/search",
                json=self.build_payload(query, field, per_page),
            )
            resp.raise_for_status()
        except httpx.HTTPError as e:
            raise QueryError(f"MeiliSearch query failed: {e}") from e

        hits = resp.json().get("hits", [])
        return [self.map_to_record(hit, primary_key) for hit in hits]

    # ── Schema mapping ───────────────────────────────────────────────────

    def map_to_record(self, hit: dict[str, Any], primary_key: str = "id") -> Record:
        """Map a MeiliSearch hit to ``Record``.

        Nested objects become related entities, keyed by attribute name;
        MeiliSearch's own ``_``-prefixed keys are dropped.
        """
        attributes: dict[str, Any] = {}
        related: dict[str, dict[str, Any] | None] = {}
        for key, value in hit.items():
            if key.startswith("_"):
                continue
            if isinstance(value, dict):
                related[key] = value
            else:
                attributes[key] = value
        return Record(id=hit.get(primary_key), attributes=attributes, related=related)

    # ── Health ───────────────────────────────────────────────────────────

    async def health_check(self) -> BackendHealth:
        """Check MeiliSearch health."""
        if not self._client:
            return BackendHealth(status="unhealthy", message="Client not initialized")

        try:
            start = time.monotonic()
            resp = await self._client.get("/health")
            latency_ms = int((time.monotonic() - start) * 1000)

            if resp.status_code == 200:
                status = resp.json().get("status", "unknown")
                return BackendHealth(
                    status="healthy" if status == "available" else "degraded",
                    latency_ms=latency_ms,
                    last_check=datetime.now(UTC).isoformat(),
                    message=f"status: {status}",
                )
            return BackendHealth(
                status="degraded",
                latency_ms=latency_ms,
                last_check=datetime.now(UTC).isoformat(),
                message=f"MeiliSearch returned HTTP {resp.status_code}",
            )
        except Exception as e:
            return BackendHealth(status="unhealthy", message=str(e))
