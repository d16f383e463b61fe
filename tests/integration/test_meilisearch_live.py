"""Integration tests for MeiliSearchBackend against a real MeiliSearch instance."""

from __future__ import annotations

import pytest

from typeahead.backends.meilisearch.backend import MeiliSearchBackend
from typeahead.core.registry import EndpointRegistry

pytestmark = [pytest.mark.integration, pytest.mark.meilisearch]

MEILI_INDEX = "test-users"
MEILI_KEY = "test-master-key"


@pytest.fixture
async def backend(meilisearch_ready):
    b = MeiliSearchBackend(
        base_url=meilisearch_ready,
        indexes={"user": MEILI_INDEX},
        api_key=MEILI_KEY,
    )
    await b.initialize()
    yield b
    await b.shutdown()


class TestMeiliSearchHealth:
    async def test_health_check_returns_healthy(self, backend):
        health = await backend.health_check()
        assert health.status == "healthy"
        assert health.latency_ms >= 0


class TestMeiliSearchSearch:
    async def test_prefix_search_on_one_field(self, backend):
        records = await backend.search("user", "jan", "first_name", per_page=10)
        names = {r.get("first_name") for r in records}
        assert names == {"Jane", "Janet"}

    async def test_unrestricted_search_covers_all_fields(self, backend):
        records = await backend.search("user", "jan", None, per_page=10)
        ids = {r.identifier for r in records}
        assert {1, 2, 5} <= ids

    async def test_per_page_limit(self, backend):
        records = await backend.search("user", "", None, per_page=2)
        assert len(records) <= 2


class TestMeiliSearchEndpoint:
    async def test_multi_field_endpoint_dedupes_and_sorts(self, backend):
        registry = EndpointRegistry(full_text=backend)
        endpoint = registry.register(
            "user",
            ["first_name", "last_name"],
            {"full_text_fields": ["first_name", "last_name"]},
        )

        body = await endpoint.complete("jan")

        lines = body.splitlines()
        assert lines == ["Jane Doe|1", "Janet Brown|5", "John Janssen|2"]
