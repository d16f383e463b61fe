"""SQLAlchemy relational backend."""

from typeahead.backends.sqlalchemy.backend import SQLAlchemyBackend

__all__ = ["SQLAlchemyBackend"]
