"""Tests for the autocomplete endpoint."""

from __future__ import annotations

from collections.abc import Iterator
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from typeahead.api.app import build_registry, create_app, register_endpoints
from typeahead.api.deps import set_registry
from typeahead.backends.memory.backend import InMemoryBackend
from typeahead.config.settings import EndpointConfig, Settings
from typeahead.core.registry import EndpointRegistry
from typeahead.exceptions import ConfigurationError, QueryError


@pytest.fixture
def client(settings: Settings, registry: EndpointRegistry) -> Iterator[TestClient]:
    app = create_app(settings)
    registry.register("user", ["first_name", "last_name"], {"delimiter": ","})
    registry.register("post", "title", {"associations": {"author": "name"}, "handler_name": "posts"})
    registry.register("tag", "name", {"collection_source": "tags", "handler_name": "tags"})
    registry.add_collection("tags", [{"id": 1, "name": "ruby"}, {"id": 2, "name": "rust"}, {"id": 3, "name": "rake"}])
    set_registry(registry)
    yield TestClient(app)
    set_registry(None)


class TestAutocompleteEndpoint:
    def test_plain_text_lines(self, client: TestClient) -> None:
        response = client.get("/v1/autocomplete/auto_complete_for_user_first_name_last_name", params={"q": "jan"})
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert response.text == "Jane,Doe|1\nJanet,Brown|5\nJohn,Janssen|2"

    def test_related_fields(self, client: TestClient) -> None:
        response = client.get("/v1/autocomplete/posts", params={"q": "rails"})
        assert response.text == "Ruby on Rails Matz|10"

    def test_collection(self, client: TestClient) -> None:
        assert client.get("/v1/autocomplete/tags", params={"q": "ra"}).text == "rake|3"

    def test_missing_query_matches_everything(self, client: TestClient) -> None:
        assert client.get("/v1/autocomplete/tags").text == "rake|3\nruby|1\nrust|2"

    def test_no_matches_is_empty_body(self, client: TestClient) -> None:
        response = client.get("/v1/autocomplete/posts", params={"q": "haskell"})
        assert response.status_code == 200
        assert response.text == ""

    def test_unknown_endpoint(self, client: TestClient) -> None:
        response = client.get("/v1/autocomplete/nope", params={"q": "x"})
        assert response.status_code == 404
        assert "nope" in response.json()["detail"]

    def test_backend_failure(self, client: TestClient, persistence: InMemoryBackend) -> None:
        persistence.search = AsyncMock(side_effect=QueryError("database down"))  # type: ignore[method-assign]
        response = client.get("/v1/autocomplete/posts", params={"q": "x"})
        assert response.status_code == 502
        assert response.json()["detail"] == "Search backend failed: database down"

    def test_configuration_failure(self, client: TestClient, persistence: InMemoryBackend) -> None:
        persistence.search = AsyncMock(side_effect=ConfigurationError("bad relation"))  # type: ignore[method-assign]
        response = client.get("/v1/autocomplete/posts", params={"q": "x"})
        assert response.status_code == 500
        assert response.json()["detail"] == "Autocomplete failed: bad relation"


class TestStartupRegistration:
    def test_endpoints_from_settings(self, settings: Settings) -> None:
        settings = settings.model_copy(
            update={
                "endpoints": [
                    EndpointConfig(entity="tag", fields="name", options={"collection_source": "tags"}),
                    EndpointConfig(entity="tag", fields=["name", "slug"], options={"collection_source": "tags"}),
                ]
            }
        )
        registry = build_registry(settings)
        register_endpoints(registry, settings)
        # The conflicting second endpoint is skipped.
        assert registry.endpoints == ["auto_complete_for_tag_name"]

    def test_unknown_full_text_backend(self, settings: Settings) -> None:
        settings = settings.model_copy(update={"full_text": settings.full_text.model_copy(update={"backend": "solr"})})
        with pytest.raises(ConfigurationError, match="Unknown full-text backend 'solr'"):
            build_registry(settings)

    def test_builds_configured_backends(self, settings: Settings) -> None:
        settings = settings.model_copy(
            update={
                "persistence": settings.persistence.model_copy(update={"url": "sqlite+aiosqlite://"}),
                "full_text": settings.full_text.model_copy(update={"backend": "meilisearch"}),
            }
        )
        assert set(build_registry(settings).backends) == {"sqlalchemy", "meilisearch"}
