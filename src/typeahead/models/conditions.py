"""Backend-agnostic condition tree for relational autocomplete searches."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Predicate(BaseModel):
    """Case-insensitive "field contains value" test on one column."""

    model_config = ConfigDict(frozen=True)

    table: str = Field(description="Table identifier the field belongs to")
    field: str = Field(description="Field name")
    relation: str | None = Field(default=None, description="Relation name for related-entity fields")

    @property
    def qualified_name(self) -> str:
        return f"{self.table}.{self.field}"


class ConditionTree(BaseModel):
    """OR-combined predicates with their bound parameters.

    ``parameters[i]`` is bound to ``predicates[i]``. ``selection`` lists the
    qualified columns a backend should project (identifier first) and
    ``joins`` the relations that must be joined to evaluate the predicates.
    """

    model_config = ConfigDict(frozen=True)

    entity: str = Field(description="Entity type searched")
    table: str = Field(description="Table identifier of the primary entity")
    primary_key: str = Field(default="id", description="Identifier field of the primary entity")
    predicates: tuple[Predicate, ...] = Field(default=(), description="OR-combined predicates")
    parameters: tuple[str, ...] = Field(default=(), description="Bound parameter per predicate")
    selection: tuple[str, ...] = Field(default=(), description="Qualified projected columns")
    joins: tuple[str, ...] = Field(default=(), description="Relations to join")

    def to_sql(self) -> str:
        """Render the informational SQL form with ``?`` placeholders."""
        return " OR ".join(f"LOWER({p.qualified_name}) LIKE ?" for p in self.predicates)

    def bound(self) -> list[tuple[Predicate, str]]:
        """Pair each predicate with its bound parameter."""
        return list(zip(self.predicates, self.parameters, strict=True))
