"""Tests for the line renderer."""

from __future__ import annotations

from types import SimpleNamespace

from typeahead.core.renderer import render, render_line
from typeahead.core.resolver import resolve_plan
from typeahead.models.record import Record, as_record


class TestRenderLine:
    def test_values_joined_by_delimiter(self) -> None:
        plan = resolve_plan("user", ["first_name", "last_name"], {"delimiter": ","})
        record = Record(id=42, attributes={"first_name": "Jane", "last_name": "Doe"})
        assert render_line(record, plan) == "Jane,Doe|42"

    def test_default_delimiter_is_space(self) -> None:
        plan = resolve_plan("user", ["first_name", "last_name"])
        record = Record(id=7, attributes={"first_name": "Jane", "last_name": "Doe"})
        assert render_line(record, plan) == "Jane Doe|7"

    def test_none_renders_empty(self) -> None:
        plan = resolve_plan("user", ["first_name", "last_name"], {"delimiter": ","})
        record = Record(id=3, attributes={"first_name": "Jane", "last_name": None})
        assert render_line(record, plan) == "Jane,|3"

    def test_related_values_follow_primary_values(self) -> None:
        plan = resolve_plan("post", "title", {"associations": {"author": ["name", "email"]}, "delimiter": " - "})
        record = Record(
            id=10,
            attributes={"title": "Ruby on Rails"},
            related={"author": {"name": "Matz", "email": "matz@example.com"}},
        )
        assert render_line(record, plan) == "Ruby on Rails - Matz - matz@example.com|10"

    def test_missing_related_entity_renders_empty(self) -> None:
        plan = resolve_plan("post", "title", {"associations": {"author": "name"}})
        record = Record(id=13, attributes={"title": "Untitled"}, related={"author": None})
        assert render_line(record, plan) == "Untitled |13"

    def test_attribute_objects(self) -> None:
        plan = resolve_plan("tag", "name")
        tag = SimpleNamespace(id=5, name="rake", owner=SimpleNamespace(id=1, login="jim"))
        assert render_line(as_record(tag), plan) == "rake|5"


class TestRender:
    def test_lines_joined_by_newline(self) -> None:
        plan = resolve_plan("tag", "name")
        records = [Record(id=3, attributes={"name": "rake"}), Record(id=2, attributes={"name": "rust"})]
        assert render(records, plan) == "rake|3\nrust|2"

    def test_empty_results_render_empty_body(self) -> None:
        assert render([], resolve_plan("tag", "name")) == ""

    def test_transform_replaces_default_rendering(self) -> None:
        plan = resolve_plan("tag", "name")
        records = [Record(id=3, attributes={"name": "rake"}), Record(id=2, attributes={"name": "rust"})]
        seen = []

        def to_html(items) -> str:
            seen.append(items)
            return "<ul>" + "".join(f"<li>{r.get('name')}</li>" for r in items) + "</ul>"

        assert render(records, plan, to_html) == "<ul><li>rake</li><li>rust</li></ul>"
        assert seen == [records]
