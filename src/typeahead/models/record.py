"""Result records — The field-access capability every search result provides.

The engine never inspects a backend's native row or document type. It only
needs to read a named field, read the record identifier, and step into a
related entity. Backends return ``Record`` instances; in-memory collections
of arbitrary objects are wrapped with ``as_record()``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field


@runtime_checkable
class FieldAccessor(Protocol):
    """Read access to the fields of a retrieved entity."""

    @property
    def identifier(self) -> Any: ...

    def get(self, field: str) -> Any: ...

    def relation(self, name: str) -> FieldAccessor | None: ...


class Record(BaseModel):
    """Generic record backed by a mapping of field name to value.

    Related entities are stored as nested mappings keyed by relation name,
    e.g. ``{"author": {"name": "Jane"}}``.
    """

    model_config = ConfigDict(frozen=True)

    id: Any = Field(description="Record identifier (primary key value)")
    attributes: dict[str, Any] = Field(default_factory=dict, description="Field values of the primary entity")
    related: dict[str, dict[str, Any] | None] = Field(
        default_factory=dict,
        description="Field values of related entities, keyed by relation name",
    )

    @property
    def identifier(self) -> Any:
        return self.id

    def get(self, field: str) -> Any:
        return self.attributes.get(field)

    def relation(self, name: str) -> Record | None:
        values = self.related.get(name)
        if values is None:
            return None
        return Record(id=values.get("id"), attributes=values)


class ObjectRecord:
    """Adapter exposing an arbitrary mapping or attribute object as a record."""

    __slots__ = ("_obj", "_primary_key")

    def __init__(self, obj: Any, primary_key: str = "id") -> None:
        self._obj = obj
        self._primary_key = primary_key

    @property
    def identifier(self) -> Any:
        return self.get(self._primary_key)

    def get(self, field: str) -> Any:
        if isinstance(self._obj, Mapping):
            return self._obj.get(field)
        return getattr(self._obj, field, None)

    def relation(self, name: str) -> FieldAccessor | None:
        target = self.get(name)
        if target is None:
            return None
        return as_record(target)

    def __repr__(self) -> str:
        return f"ObjectRecord({self._obj!r})"


def as_record(obj: Any, primary_key: str = "id") -> FieldAccessor:
    """Return ``obj`` as a ``FieldAccessor``, wrapping it when necessary."""
    if isinstance(obj, Record | ObjectRecord):
        return obj
    return ObjectRecord(obj, primary_key=primary_key)
