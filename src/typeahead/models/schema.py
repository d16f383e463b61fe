"""Entity schema models — Table names, identifiers and many-to-one relations."""

from __future__ import annotations

from pydantic import BaseModel, Field


class RelationConfig(BaseModel):
    """A many-to-one relation from an entity to a related table."""

    table: str = Field(description="Table identifier of the related entity")
    foreign_key: str = Field(description="Column on the owning table referencing the related table")
    references: str = Field(default="id", description="Referenced column on the related table")


class EntityConfig(BaseModel):
    """Schema metadata for one searchable entity."""

    table: str | None = Field(default=None, description="Table identifier (default: the entity name)")
    primary_key: str = Field(default="id", description="Identifier column")
    relations: dict[str, RelationConfig] = Field(default_factory=dict, description="Relations keyed by name")
