"""In-memory backends."""

from typeahead.backends.memory.backend import InMemoryBackend, InMemoryFullTextBackend

__all__ = ["InMemoryBackend", "InMemoryFullTextBackend"]
