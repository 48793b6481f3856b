"""Tests for settings and mappings loading."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from mcpifier.config.loader import (
    SettingsLoader,
    apply_mappings,
    load_mappings,
    load_settings,
    resolve_base_address,
    validate_for_startup,
)
from mcpifier.config.models import Mappings, MappingsRest, McpifierSettings
from mcpifier.protocols.errors import ConfigurationError

_SETTINGS_YAML = """\
mcpifier:
  protocolVersion: "2025-03-26"
  serverInfo:
    name: petstore
    version: "2.0"
  instructions: Pet tools.
  rest:
    baseAddress: ${PETSTORE_URL}
    forwardedHeaders: [Authorization, X-Api-Key]
    timeout: 5
  http:
    route: /mcp
  authorization:
    requireAuthorization: true
    resourceMetadata:
      resource: https://mcp.example.com/mcp
  tools:
    - mcp:
        name: get_pet
        inputSchema: {type: object}
      rest:
        method: GET
        path: /pets/{id}
"""


def _mappings_file(tmp_path: Path, name: str, tools: list[dict], base: str | None = None) -> Path:
    content: dict = {"mcpifier": {"tools": tools}}
    if base:
        content["mcpifier"]["rest"] = {"baseAddress": base}
    path = tmp_path / name
    path.write_text(json.dumps(content), encoding="utf-8")
    return path


def _tool_entry(name: str, path: str = "/x") -> dict:
    return {"mcp": {"name": name, "inputSchema": {"type": "object"}}, "rest": {"path": path}}


class TestSettingsLoader:
    def test_load_full(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PETSTORE_URL", "https://petstore.example.com/")
        f = tmp_path / "settings.yaml"
        f.write_text(_SETTINGS_YAML)

        settings = SettingsLoader(f).load()

        assert settings.protocol_version == "2025-03-26"
        assert settings.server_info.name == "petstore"
        assert settings.instructions == "Pet tools."
        assert settings.rest.base_address == "https://petstore.example.com/"
        assert settings.rest.forwarded_headers == ["Authorization", "X-Api-Key"]
        assert settings.rest.timeout == 5
        assert settings.http.route == "/mcp"
        assert settings.authorization.require_authorization
        assert settings.authorization.resource_metadata.resource == "https://mcp.example.com/mcp"
        assert [t.name for t in settings.tools] == ["get_pet"]

    def test_defaults_without_file(self) -> None:
        settings = SettingsLoader().load()
        assert settings.protocol_version == "2025-06-18"
        assert settings.server_info.name == "mcpifier"
        assert settings.rest.forwarded_headers == ["Authorization"]
        assert settings.rest.timeout == 30
        assert settings.http.route == "/"
        assert not settings.authorization.require_authorization
        assert settings.tools == []

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        f = tmp_path / "empty.yaml"
        f.write_text("")
        assert SettingsLoader(f).load() == McpifierSettings()

    def test_file_not_found(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="Cannot read"):
            SettingsLoader(tmp_path / "missing.yaml").load()

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        f = tmp_path / "bad.yaml"
        f.write_text("{{{{invalid")
        with pytest.raises(ConfigurationError, match="YAML parse error"):
            SettingsLoader(f).load()

    def test_not_mapping(self, tmp_path: Path) -> None:
        f = tmp_path / "list.yaml"
        f.write_text("- item1\n- item2\n")
        with pytest.raises(ConfigurationError, match="mapping"):
            SettingsLoader(f).load()

    def test_invalid_settings(self, tmp_path: Path) -> None:
        f = tmp_path / "settings.yaml"
        f.write_text("mcpifier:\n  rest:\n    timeout: soon\n")
        with pytest.raises(ConfigurationError, match="Invalid settings"):
            SettingsLoader(f).load()


class TestLoadMappings:
    def test_load(self, tmp_path: Path) -> None:
        path = _mappings_file(tmp_path, "m.json", [_tool_entry("a")], base="https://api.example.com")
        mappings = load_mappings(path)
        assert mappings.base_address == "https://api.example.com"
        assert [t.name for t in mappings.tools] == ["a"]

    def test_legacy_root_key(self, tmp_path: Path) -> None:
        path = tmp_path / "m.json"
        path.write_text(json.dumps({"Mcpifier": {"tools": [_tool_entry("a")]}}))
        assert [t.name for t in load_mappings(path).tools] == ["a"]

    def test_schema_text_not_env_expanded(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SKU", "expanded")
        entry = _tool_entry("a")
        entry["mcp"]["inputSchema"] = {
            "type": "object",
            "properties": {"code": {"type": "string", "pattern": "^[A-Z]+$SKU"}},
        }
        path = tmp_path / "m.json"
        path.write_text(json.dumps({"mcpifier": {"tools": [entry]}}))

        (tool,) = load_mappings(path).tools

        assert tool.mcp.input_schema["properties"]["code"]["pattern"] == "^[A-Z]+$SKU"

    def test_invalid_tool(self, tmp_path: Path) -> None:
        path = tmp_path / "m.json"
        path.write_text(json.dumps({"mcpifier": {"tools": [{"mcp": {}}]}}))
        with pytest.raises(ConfigurationError, match="Invalid mappings"):
            load_mappings(path)


class TestApplyMappings:
    def test_mappings_override_settings(self, make_tool) -> None:
        settings = McpifierSettings(tools=[make_tool("a", path="/settings"), make_tool("b")])
        mappings = Mappings(tools=[make_tool("a", path="/mappings")])

        merged = apply_mappings(settings, [mappings])

        by_name = {t.name: t for t in merged.tools}
        assert set(by_name) == {"a", "b"}
        assert by_name["a"].rest.path == "/mappings"

    def test_later_mappings_win(self, make_tool) -> None:
        first = Mappings(tools=[make_tool("a", path="/first")])
        second = Mappings(tools=[make_tool("a", path="/second")])
        merged = apply_mappings(McpifierSettings(), [first, second])
        assert merged.tools[0].rest.path == "/second"

    def test_base_address_adopted_when_missing(self) -> None:
        first = Mappings(rest=MappingsRest(base_address="https://one.example.com"))
        second = Mappings(rest=MappingsRest(base_address="https://two.example.com"))
        merged = apply_mappings(McpifierSettings(), [first, second])
        assert merged.rest.base_address == "https://one.example.com"

    def test_settings_base_address_kept(self) -> None:
        settings = McpifierSettings.model_validate({"rest": {"baseAddress": "https://mine.example.com"}})
        mappings = Mappings(rest=MappingsRest(base_address="https://theirs.example.com"))
        assert apply_mappings(settings, [mappings]).rest.base_address == "https://mine.example.com"

    def test_original_settings_untouched(self, make_tool) -> None:
        settings = McpifierSettings()
        apply_mappings(settings, [Mappings(tools=[make_tool("a")])])
        assert settings.tools == []


class TestLoadSettings:
    def test_default_mappings_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _mappings_file(tmp_path, "mappings.json", [_tool_entry("a")], base="https://api.example.com")
        monkeypatch.chdir(tmp_path)

        settings = load_settings()

        assert [t.name for t in settings.tools] == ["a"]
        assert settings.rest.base_address == "https://api.example.com"

    def test_explicit_mappings_skip_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _mappings_file(tmp_path, "mappings.json", [_tool_entry("default")])
        other = _mappings_file(tmp_path, "other.json", [_tool_entry("other")])
        monkeypatch.chdir(tmp_path)

        settings = load_settings(mappings=[other])

        assert [t.name for t in settings.tools] == ["other"]

    def test_no_files(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        assert load_settings().tools == []


class TestResolveBaseAddress:
    def test_absolute_unchanged(self) -> None:
        assert resolve_base_address("https://api.example.com/v1", mode="stdio") == "https://api.example.com/v1"

    def test_relative_in_http_mode(self) -> None:
        assert (
            resolve_base_address("/api", mode="http", host="0.0.0.0", port=8080)
            == "http://localhost:8080/api"
        )

    def test_relative_keeps_named_host(self) -> None:
        assert resolve_base_address("api/", mode="http", host="example.internal", port=80) == (
            "http://example.internal:80/api/"
        )

    def test_relative_ipv6_wildcard(self) -> None:
        assert resolve_base_address("/api", mode="http", host="::", port=8000) == "http://localhost:8000/api"

    def test_relative_in_stdio_mode(self) -> None:
        with pytest.raises(ConfigurationError, match="Relative base address"):
            resolve_base_address("/api", mode="stdio")

    def test_missing(self) -> None:
        with pytest.raises(ConfigurationError, match="No REST base address"):
            resolve_base_address("", mode="http")


class TestValidateForStartup:
    def test_no_tools(self) -> None:
        with pytest.raises(ConfigurationError, match="No tools"):
            validate_for_startup(McpifierSettings(), "http")

    def test_authorization_on_stdio_warns(self, make_tool, caplog: pytest.LogCaptureFixture) -> None:
        settings = McpifierSettings.model_validate(
            {"authorization": {"requireAuthorization": True}, "tools": [make_tool("a").to_dict()]}
        )
        with caplog.at_level(logging.WARNING):
            validate_for_startup(settings, "stdio")
        assert "not supported" in caplog.text
