"""Base backend interfaces — Abstract classes for autocomplete data sources."""

from typeahead.backends.base.adapter import (
    Backend,
    BackendHealth,
    FullTextBackend,
    PersistenceBackend,
    RelationResolver,
)
from typeahead.backends.base.catalog import SchemaCatalog

__all__ = [
    "Backend",
    "BackendHealth",
    "FullTextBackend",
    "PersistenceBackend",
    "RelationResolver",
    "SchemaCatalog",
]
