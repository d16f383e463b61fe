"""Tests for the condition builder."""

from __future__ import annotations

import pytest

from typeahead.backends.base.catalog import SchemaCatalog
from typeahead.core.conditions import build_conditions, like_parameter
from typeahead.core.resolver import resolve_plan
from typeahead.exceptions import ConfigurationError
from typeahead.models.conditions import Predicate


class TestLikeParameter:
    def test_wraps_and_lowercases(self) -> None:
        assert like_parameter("JaN") == "%jan%"

    def test_empty_and_none_match_everything(self) -> None:
        assert like_parameter("") == "%%"
        assert like_parameter(None) == "%%"


class TestBuildConditions:
    def test_single_field(self, catalog: SchemaCatalog) -> None:
        tree = build_conditions(resolve_plan("post", "title"), "Ruby", catalog)
        assert tree.table == "posts"
        assert tree.predicates == (Predicate(table="posts", field="title"),)
        assert tree.parameters == ("%ruby%",)
        assert tree.selection == ("posts.id", "posts.title")
        assert tree.joins == ()
        assert tree.to_sql() == "LOWER(posts.title) LIKE ?"

    def test_multiple_fields_are_or_combined(self, catalog: SchemaCatalog) -> None:
        tree = build_conditions(resolve_plan("user", ["first_name", "last_name"]), "ja", catalog)
        assert tree.to_sql() == "LOWER(users.first_name) LIKE ? OR LOWER(users.last_name) LIKE ?"
        assert tree.parameters == ("%ja%", "%ja%")
        assert tree.selection == ("users.id", "users.first_name", "users.last_name")

    def test_related_fields_follow_primary_fields(self, catalog: SchemaCatalog) -> None:
        plan = resolve_plan("post", "title", {"associations": {"author": "name"}})
        tree = build_conditions(plan, "ma", catalog)
        assert tree.predicates[-1] == Predicate(table="authors", field="name", relation="author")
        assert tree.to_sql() == "LOWER(posts.title) LIKE ? OR LOWER(authors.name) LIKE ?"
        assert tree.selection == ("posts.id", "posts.title", "authors.name")
        assert tree.joins == ("author",)

    @pytest.mark.parametrize(
        ("fields", "associations"),
        [
            ("title", None),
            (["title", "body"], None),
            (["title"], {"author": ["name", "email"]}),
            (["title", "body", "slug"], {"author": "name"}),
        ],
    )
    def test_predicate_and_parameter_counts(self, catalog: SchemaCatalog, fields, associations) -> None:
        plan = resolve_plan("post", fields, {"associations": associations} if associations else None)
        tree = build_conditions(plan, "Query", catalog)
        expected = len(plan.primary_fields) + plan.related_field_count
        assert len(tree.predicates) == expected
        assert len(tree.parameters) == expected
        assert set(tree.parameters) == {"%query%"}

    def test_is_referentially_transparent(self, catalog: SchemaCatalog) -> None:
        plan = resolve_plan("post", ["title", "body"], {"associations": {"author": "name"}})
        assert build_conditions(plan, "x", catalog) == build_conditions(plan, "x", catalog)

    def test_unknown_relation_raises(self, catalog: SchemaCatalog) -> None:
        plan = resolve_plan("post", "title", {"associations": {"editor": "name"}})
        with pytest.raises(ConfigurationError, match="Unknown relation 'editor'"):
            build_conditions(plan, "x", catalog)

    def test_custom_primary_key_in_selection(self, catalog: SchemaCatalog) -> None:
        plan = resolve_plan("user", "first_name", {"primary_key": "uuid"})
        assert build_conditions(plan, "", catalog).selection[0] == "users.uuid"
