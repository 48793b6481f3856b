"""Tests for ToolRegistry and merge_tools."""

from __future__ import annotations

from mcpifier.protocols.registry import ToolRegistry, merge_tools


class TestMergeTools:
    def test_override_wins_on_name(self, make_tool) -> None:
        base = [make_tool("a", path="/base/a"), make_tool("b", path="/base/b")]
        override = [make_tool("b", path="/override/b")]

        merged = merge_tools(base, override)

        assert [t.name for t in merged] == ["b", "a"]
        assert merged[0].rest.path == "/override/b"

    def test_union_of_disjoint(self, make_tool) -> None:
        merged = merge_tools([make_tool("a")], [make_tool("b")])
        assert {t.name for t in merged} == {"a", "b"}

    def test_empty_inputs(self, make_tool) -> None:
        assert merge_tools([], []) == []
        assert [t.name for t in merge_tools([make_tool("a")], [])] == ["a"]

    def test_inputs_not_modified(self, make_tool) -> None:
        base = [make_tool("a")]
        override = [make_tool("a", path="/x")]
        merge_tools(base, override)
        assert base[0].rest.path == "/users/{id}"
        assert len(override) == 1


class TestToolRegistry:
    def test_lookup_is_case_sensitive(self, user_tools) -> None:
        registry = ToolRegistry(user_tools)
        assert registry["get_user"].name == "get_user"
        assert "GET_USER" not in registry

    def test_iteration_keeps_order(self, user_tools) -> None:
        registry = ToolRegistry(user_tools)
        assert list(registry) == ["get_user", "create_user", "search_users"]
        assert len(registry) == 3

    def test_first_duplicate_wins(self, make_tool) -> None:
        registry = ToolRegistry([make_tool("a", path="/first"), make_tool("a", path="/second")])
        assert registry["a"].rest.path == "/first"

    def test_merged(self, make_tool) -> None:
        registry = ToolRegistry.merged([make_tool("a", path="/base")], [make_tool("a", path="/new")])
        assert registry["a"].rest.path == "/new"

    def test_get_missing(self) -> None:
        assert ToolRegistry().get("nope") is None
