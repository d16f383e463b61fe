"""Query plan and endpoint option models.

``AutocompleteOptions`` is the raw, caller-facing option set accepted at
registration. ``QueryPlan`` is its canonical, validated form: fields are
normalized to tuples, defaults are filled in and the search strategy is a
tagged union resolved once rather than re-derived from key presence on every
call.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

ALL_FIELDS = "all"


class SortDirection(StrEnum):
    """Sort direction of an ``OrderBy`` clause."""

    ASC = "ASC"
    DESC = "DESC"


class OrderBy(BaseModel):
    """A single ordering clause (field name plus direction)."""

    model_config = ConfigDict(frozen=True)

    field: str = Field(description="Field to order by, optionally qualified as 'table.field'")
    direction: SortDirection = Field(default=SortDirection.ASC, description="Sort direction")

    def __str__(self) -> str:
        return f"{self.field} {self.direction.value}"


# ── Strategies ───────────────────────────────────────────────────────────


class CollectionStrategy(BaseModel):
    """Filter an in-memory collection supplied by the host application."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["collection"] = "collection"
    source: str = Field(description="Name of the in-memory collection")
    filter_by: str = Field(description="Field matched against the query and used for sorting")


class FullTextStrategy(BaseModel):
    """Query a full-text backend, either per field or across all indexed fields."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["full_text"] = "full_text"
    search_fields: tuple[str, ...] | Literal["all"] = Field(
        description="Fields searched one query each, or 'all' for a single unrestricted query",
    )

    @property
    def searches_all(self) -> bool:
        return self.search_fields == ALL_FIELDS


class RelationalStrategy(BaseModel):
    """Run a case-insensitive substring search through the persistence backend."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["relational"] = "relational"


Strategy = Annotated[
    CollectionStrategy | FullTextStrategy | RelationalStrategy,
    Field(discriminator="kind"),
]


# ── Options and plan ─────────────────────────────────────────────────────


class AutocompleteOptions(BaseModel):
    """Options accepted when registering an autocomplete endpoint.

    Keys not listed here are kept in ``model_extra`` and forwarded verbatim
    to the persistence backend.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    limit: int | None = Field(default=None, ge=1, description="Maximum number of results (default 10)")
    order: str | None = Field(
        default=None,
        description="Ordering, e.g. 'last_name ASC, first_name ASC' (default '<first field> ASC')",
    )
    delimiter: str | None = Field(default=None, description="Separator between rendered field values (default ' ')")
    associations: dict[str, str | list[str]] | None = Field(
        default=None,
        description="Related fields to match and render, keyed by relation name",
    )
    collection_source: str | None = Field(
        default=None,
        validation_alias=AliasChoices("collection_source", "collectionSource"),
        description="Name of an in-memory collection to filter instead of querying a backend",
    )
    collection_filter_by: str | None = Field(
        default=None,
        validation_alias=AliasChoices("collection_filter_by", "collectionFilterBy"),
        description="Field used to filter the collection (default: first field)",
    )
    full_text_fields: list[str] | Literal["all"] | None = Field(
        default=None,
        validation_alias=AliasChoices("full_text_fields", "fullTextFields"),
        description="Full-text fields to search, or 'all' for every indexed field",
    )
    handler_name: str | None = Field(
        default=None,
        validation_alias=AliasChoices("handler_name", "handlerName"),
        description="Endpoint name (default 'auto_complete_for_<entity>_<fields>')",
    )
    primary_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("primary_key", "primaryKey"),
        description="Identifier field (default from the schema catalog, else 'id')",
    )

    @property
    def extra_options(self) -> dict[str, Any]:
        return dict(self.model_extra or {})


class QueryPlan(BaseModel):
    """Canonical, immutable description of one autocomplete endpoint."""

    model_config = ConfigDict(frozen=True)

    entity: str = Field(description="Entity type searched")
    primary_fields: tuple[str, ...] = Field(min_length=1, description="Fields matched and rendered, in order")
    related_fields: dict[str, tuple[str, ...]] = Field(
        default_factory=dict,
        description="Related fields keyed by relation name, in order",
    )
    delimiter: str = Field(default=" ", description="Separator between rendered field values")
    order_by: tuple[OrderBy, ...] = Field(
        min_length=1,
        description="Ordering clauses passed to the persistence backend, applied in turn",
    )
    limit: int = Field(default=10, ge=1, description="Maximum number of results")
    primary_key: str = Field(default="id", description="Identifier field of the entity")
    strategy: Strategy = Field(default_factory=RelationalStrategy, description="Search strategy")
    extra_options: dict[str, Any] = Field(
        default_factory=dict,
        description="Caller-supplied options forwarded to the persistence backend",
    )

    @property
    def sort_field(self) -> str:
        """Field used to sort merged full-text results."""
        return self.primary_fields[0]

    @property
    def related_field_count(self) -> int:
        return sum(len(fields) for fields in self.related_fields.values())
