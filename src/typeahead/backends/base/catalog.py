"""Schema catalog — Relation metadata built from entity configuration."""

from __future__ import annotations

from collections.abc import Mapping

from typeahead.backends.base.adapter import RelationResolver
from typeahead.exceptions import ConfigurationError
from typeahead.models.schema import EntityConfig, RelationConfig


class SchemaCatalog(RelationResolver):
    """Relation resolver backed by a mapping of entity name to ``EntityConfig``.

    Entities missing from the catalog use their own name as table identifier
    and ``id`` as primary key, but have no relations.

    Example:
        >>> catalog = SchemaCatalog({
        ...     "post": EntityConfig(
        ...         table="posts",
        ...         relations={"author": RelationConfig(table="authors", foreign_key="author_id")},
        ...     ),
        ... })
        >>> catalog.resolve("post", "author")
        'authors'
    """

    def __init__(self, entities: Mapping[str, EntityConfig] | None = None) -> None:
        self._entities: dict[str, EntityConfig] = dict(entities or {})

    def entity(self, entity: str) -> EntityConfig:
        return self._entities.get(entity) or EntityConfig()

    def table_for(self, entity: str) -> str:
        return self.entity(entity).table or entity

    def primary_key(self, entity: str) -> str:
        return self.entity(entity).primary_key

    def relation(self, entity: str, relation: str) -> RelationConfig:
        """Return the full relation definition.

        Raises:
            ConfigurationError: If ``entity`` has no relation named ``relation``.
        """
        relations = self.entity(entity).relations
        if relation not in relations:
            raise ConfigurationError(
                f"Unknown relation '{relation}' on entity '{entity}'. "
                f"Available relations: {list(relations.keys())}"
            )
        return relations[relation]

    def resolve(self, entity: str, relation: str) -> str:
        return self.relation(entity, relation).table
