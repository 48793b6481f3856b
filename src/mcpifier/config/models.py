"""Settings models — the ``mcpifier`` section of settings and mappings files.

Example settings YAML::

    mcpifier:
      protocolVersion: "2025-06-18"
      serverInfo:
        name: petstore
        version: "1.0"
      instructions: Tools for the Petstore API.
      rest:
        baseAddress: https://petstore.example.com/v1/
        forwardedHeaders: [Authorization]
        timeout: 30
      http:
        route: /mcp
      authorization:
        requireAuthorization: true
        resourceMetadata:
          resource: https://mcp.example.com/mcp
          authorization_servers: [https://login.example.com]
      tools: []

A mappings file (as written by ``mcpifier convert``) only carries
``rest.baseAddress`` and ``tools``.
"""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from mcpifier.protocols.handlers import DEFAULT_PROTOCOL_VERSION
from mcpifier.protocols.models import ServerInfo, ToolMapping

# Older mapping files spell the root key "Mcpifier".
_ROOT_KEY = AliasChoices("mcpifier", "Mcpifier")


class RestSettings(BaseModel):
    """Where and how tool calls reach the REST API."""

    model_config = ConfigDict(populate_by_name=True)

    base_address: str = Field(default="", alias="baseAddress")
    forwarded_headers: list[str] = Field(
        default_factory=lambda: ["Authorization"], alias="forwardedHeaders"
    )
    timeout: float = 30.0


class HttpSettings(BaseModel):
    """HTTP transport options."""

    route: str = "/"


class ProtectedResourceMetadata(BaseModel):
    """OAuth 2.0 protected resource metadata (RFC 9728), served verbatim."""

    model_config = ConfigDict(extra="allow")

    resource: str | None = None
    authorization_servers: list[str] | None = None
    scopes_supported: list[str] | None = None
    bearer_methods_supported: list[str] | None = None
    resource_name: str | None = None
    resource_documentation: str | None = None


class AuthorizationSettings(BaseModel):
    """Bearer challenge settings for the HTTP transport."""

    model_config = ConfigDict(populate_by_name=True)

    require_authorization: bool = Field(default=False, alias="requireAuthorization")
    resource_metadata: ProtectedResourceMetadata | None = Field(
        default=None, alias="resourceMetadata"
    )


class McpifierSettings(BaseModel):
    """Everything the server needs before it starts serving."""

    model_config = ConfigDict(populate_by_name=True)

    protocol_version: str = Field(default=DEFAULT_PROTOCOL_VERSION, alias="protocolVersion")
    server_info: ServerInfo = Field(default_factory=ServerInfo, alias="serverInfo")
    instructions: str | None = None
    rest: RestSettings = Field(default_factory=RestSettings)
    http: HttpSettings = Field(default_factory=HttpSettings)
    authorization: AuthorizationSettings = Field(default_factory=AuthorizationSettings)
    tools: list[ToolMapping] = []


class SettingsDocument(BaseModel):
    """Root of a settings file."""

    mcpifier: McpifierSettings = Field(
        default_factory=McpifierSettings,
        validation_alias=_ROOT_KEY,
        serialization_alias="mcpifier",
    )


class MappingsRest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    base_address: str | None = Field(default=None, alias="baseAddress")


class Mappings(BaseModel):
    """Tool mappings plus an optional base address."""

    rest: MappingsRest | None = None
    tools: list[ToolMapping] = []

    @property
    def base_address(self) -> str | None:
        return self.rest.base_address if self.rest else None


class MappingsDocument(BaseModel):
    """Root of a mappings file: ``{"mcpifier": {"rest": ..., "tools": [...]}}``."""

    mcpifier: Mappings = Field(
        default_factory=Mappings,
        validation_alias=_ROOT_KEY,
        serialization_alias="mcpifier",
    )

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
