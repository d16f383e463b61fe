"""MeiliSearch full-text backend."""

from typeahead.backends.meilisearch.backend import MeiliSearchBackend

__all__ = ["MeiliSearchBackend"]
