"""Tests for the choice registry (goback.project.choices)."""

from __future__ import annotations

import pytest

from goback.project.choices import (
    DATABASE_TRAITS,
    DEVOPS_TRAITS,
    TOOL_TRAITS,
    Architecture,
    Axis,
    Database,
    DevOpsTool,
    Framework,
    Tool,
    display_name,
    enum_for,
    is_compatible,
    is_valid,
    list_valid,
    lookup,
    parse_choice,
    recommended_architecture,
    recommended_tool,
)

pytestmark = pytest.mark.unit


class TestCanonicalOrder:
    @pytest.mark.parametrize(
        "axis, tokens",
        [
            (Axis.FRAMEWORK, ["fiber", "gin", "chi", "echo"]),
            (Axis.DATABASE, ["postgresql", "mysql", "sqlite"]),
            (Axis.TOOL, ["sqlx", "sqlc"]),
            (Axis.ARCHITECTURE, ["simple", "ddd", "clean", "hexagonal"]),
            (Axis.DEVOPS_TOOL, ["kubernetes", "helm", "terraform", "ansible"]),
        ],
    )
    def test_list_valid_order(self, axis, tokens):
        assert [info.token for info in list_valid(axis)] == tokens

    def test_enum_for(self):
        assert enum_for(Axis.FRAMEWORK) is Framework
        assert enum_for(Axis.DEVOPS_TOOL) is DevOpsTool

    def test_list_valid_carries_axis(self):
        assert all(info.axis == Axis.DATABASE for info in list_valid(Axis.DATABASE))


class TestLookup:
    def test_every_token_is_valid(self):
        for axis in Axis:
            for info in list_valid(axis):
                assert is_valid(axis, info.token)

    def test_unknown_token(self):
        assert not is_valid(Axis.FRAMEWORK, "rails")
        assert lookup(Axis.FRAMEWORK, "rails") is None
        assert parse_choice(Axis.FRAMEWORK, "rails") is None

    def test_tokens_are_case_sensitive(self):
        assert not is_valid(Axis.DATABASE, "PostgreSQL")

    def test_lookup_returns_display_and_description(self):
        info = lookup(Axis.ARCHITECTURE, "ddd")
        assert info is not None
        assert info.display == "Domain-Driven Design (DDD)"
        assert info.description

    def test_parse_choice_returns_member(self):
        assert parse_choice(Axis.TOOL, "sqlc") is Tool.SQLC

    def test_display_name(self):
        assert display_name(Axis.FRAMEWORK, "fiber") == "Go Fiber"
        assert display_name(Axis.DATABASE, "sqlite") == "SQLite"

    def test_display_name_falls_back_to_token(self):
        assert display_name(Axis.FRAMEWORK, "rails") == "rails"


class TestTraits:
    def test_database_traits(self):
        assert DATABASE_TRAITS[Database.POSTGRESQL].default_port == 5432
        assert DATABASE_TRAITS[Database.MYSQL].default_port == 3306
        assert DATABASE_TRAITS[Database.SQLITE].default_port is None
        assert DATABASE_TRAITS[Database.SQLITE].requires_server is False
        assert all(t.supports_relations for t in DATABASE_TRAITS.values())

    def test_tool_traits(self):
        assert TOOL_TRAITS[Tool.SQLC].has_code_generation
        assert not TOOL_TRAITS[Tool.SQLX].has_code_generation
        assert not any(t.has_migrations for t in TOOL_TRAITS.values())

    def test_devops_traits(self):
        assert DEVOPS_TRAITS[DevOpsTool.ANSIBLE].delimiters == ("<<", ">>")
        assert DEVOPS_TRAITS[DevOpsTool.KUBERNETES].delimiters is None
        assert DEVOPS_TRAITS[DevOpsTool.HELM].uses_chart_engine
        assert not DEVOPS_TRAITS[DevOpsTool.TERRAFORM].uses_chart_engine


class TestRecommendations:
    @pytest.mark.parametrize("database", list(Database))
    def test_recommended_tool_is_sqlx(self, database):
        assert recommended_tool(database) is Tool.SQLX

    @pytest.mark.parametrize(
        "complexity, expected",
        [
            ("simple", Architecture.SIMPLE),
            ("small", Architecture.SIMPLE),
            ("medium", Architecture.CLEAN),
            ("large", Architecture.DDD),
            ("Enterprise", Architecture.DDD),
            ("whatever", Architecture.SIMPLE),
        ],
    )
    def test_recommended_architecture(self, complexity, expected):
        assert recommended_architecture(complexity) is expected

    def test_every_valid_combination_is_compatible(self):
        for fw in Framework:
            for db in Database:
                for tool in Tool:
                    assert is_compatible(fw.value, db.value, tool.value)

    def test_invalid_combination(self):
        assert not is_compatible("rails", "postgresql", "sqlx")
