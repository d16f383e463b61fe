"""Backend layer — Pluggable data sources for autocomplete endpoints.

Built-in backends:
  - memory: in-process persistence and full-text backends over ``Record`` lists
  - sqlalchemy: relational search through SQLAlchemy Core (async engines)
  - meilisearch: full-text search through the MeiliSearch REST API

Implement ``PersistenceBackend`` or ``FullTextBackend`` to connect your own.
"""
