"""Shared test fixtures and configuration."""

from __future__ import annotations

import pytest

from typeahead.backends.base.catalog import SchemaCatalog
from typeahead.backends.memory.backend import InMemoryBackend, InMemoryFullTextBackend
from typeahead.config.settings import Settings
from typeahead.core.registry import EndpointRegistry
from typeahead.models.record import Record
from typeahead.models.schema import EntityConfig, RelationConfig


@pytest.fixture
def settings() -> Settings:
    """Create a test Settings instance with defaults."""
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        debug=True,
        observability={"log_format": "console"},
    )


@pytest.fixture
def catalog() -> SchemaCatalog:
    """Posts belong to authors; users have no relations."""
    return SchemaCatalog(
        {
            "post": EntityConfig(
                table="posts",
                relations={"author": RelationConfig(table="authors", foreign_key="author_id")},
            ),
            "user": EntityConfig(table="users"),
        }
    )


@pytest.fixture
def users() -> list[Record]:
    return [
        Record(id=1, attributes={"id": 1, "first_name": "Jane", "last_name": "Doe"}),
        Record(id=2, attributes={"id": 2, "first_name": "John", "last_name": "Janssen"}),
        Record(id=3, attributes={"id": 3, "first_name": "Alice", "last_name": "Jones"}),
        Record(id=4, attributes={"id": 4, "first_name": "Bob", "last_name": "Smith"}),
        Record(id=5, attributes={"id": 5, "first_name": "Janet", "last_name": "Brown"}),
    ]


@pytest.fixture
def posts() -> list[Record]:
    return [
        Record(
            id=10,
            attributes={"id": 10, "title": "Ruby on Rails"},
            related={"author": {"id": 1, "name": "Matz"}},
        ),
        Record(
            id=11,
            attributes={"id": 11, "title": "Python tips"},
            related={"author": {"id": 2, "name": "Guido"}},
        ),
        Record(
            id=12,
            attributes={"id": 12, "title": "Rust in production"},
            related={"author": {"id": 3, "name": "Graydon"}},
        ),
        Record(id=13, attributes={"id": 13, "title": "Untitled draft"}, related={"author": None}),
    ]


@pytest.fixture
def persistence(users: list[Record], posts: list[Record]) -> InMemoryBackend:
    return InMemoryBackend({"user": users, "post": posts})


@pytest.fixture
def full_text(users: list[Record]) -> InMemoryFullTextBackend:
    return InMemoryFullTextBackend({"user": users})


@pytest.fixture
def registry(
    persistence: InMemoryBackend,
    full_text: InMemoryFullTextBackend,
    catalog: SchemaCatalog,
) -> EndpointRegistry:
    return EndpointRegistry(persistence=persistence, full_text=full_text, catalog=catalog)
