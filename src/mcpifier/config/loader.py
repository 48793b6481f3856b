"""Loading settings and mappings files, and combining them for startup."""

from __future__ import annotations

import logging
import os
from collections.abc import Sequence
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import yaml
from pydantic import ValidationError

from mcpifier.config.models import Mappings, MappingsDocument, McpifierSettings, SettingsDocument
from mcpifier.protocols.errors import ConfigurationError
from mcpifier.protocols.registry import merge_tools

logger = logging.getLogger(__name__)

DEFAULT_MAPPINGS_FILE = "mappings.json"
_WILDCARD_HOSTS = ("0.0.0.0", "::", "[::]", "")


def read_document(path: Path, *, expand_env: bool = True) -> dict[str, Any]:
    """Read a YAML or JSON file.

    With *expand_env*, ``${VAR}`` and ``$VAR`` references are expanded with
    :func:`os.path.expandvars` before parsing.  An empty file yields ``{}``.

    Raises:
        ConfigurationError: If the file cannot be read or parsed, or its
            root is not a mapping.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Cannot read {path}: {exc}") from exc

    expanded = os.path.expandvars(raw) if expand_env else raw

    try:
        data: Any = yaml.safe_load(expanded)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"YAML parse error in {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a mapping")
    return data


class SettingsLoader:
    """Load a settings file into :class:`McpifierSettings`.

    Without a path the defaults are returned, so mappings files alone are
    enough to start a server.
    """

    def __init__(self, path: Path | None = None) -> None:
        self._path = path

    def load(self) -> McpifierSettings:
        if self._path is None:
            return McpifierSettings()

        data = read_document(self._path)
        try:
            settings = SettingsDocument.model_validate(data).mcpifier
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid settings in {self._path}: {exc}") from exc

        logger.debug("Loaded settings from %s", self._path)
        return settings


def load_mappings(path: Path) -> Mappings:
    """Load a mappings file such as one written by ``mcpifier convert``.

    Environment variables are not expanded: schema patterns may contain ``$``.
    """
    data = read_document(path, expand_env=False)
    try:
        mappings = MappingsDocument.model_validate(data).mcpifier
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid mappings in {path}: {exc}") from exc

    logger.info("Loaded %d tool mappings from %s", len(mappings.tools), path)
    return mappings


def default_mappings_paths(cwd: Path | None = None) -> list[Path]:
    """``mappings.json`` in *cwd* when it exists, else nothing."""
    candidate = (cwd or Path.cwd()) / DEFAULT_MAPPINGS_FILE
    return [candidate] if candidate.is_file() else []


def apply_mappings(settings: McpifierSettings, mappings: Sequence[Mappings]) -> McpifierSettings:
    """Merge each mappings file's tools over *settings*, later files winning.

    The first base address found in *mappings* is adopted only when
    *settings* has none of its own.
    """
    tools = list(settings.tools)
    base_address = settings.rest.base_address

    for entry in mappings:
        tools = merge_tools(tools, entry.tools)
        if not base_address and entry.base_address:
            base_address = entry.base_address
            logger.debug("Using base address %s from mappings", base_address)

    rest = settings.rest.model_copy(update={"base_address": base_address})
    return settings.model_copy(update={"tools": tools, "rest": rest})


def load_settings(
    config: Path | None = None, mappings: Sequence[Path] | None = None
) -> McpifierSettings:
    """Load settings plus mappings files into one :class:`McpifierSettings`.

    When *mappings* is ``None`` the default ``mappings.json`` is used if present.
    """
    settings = SettingsLoader(config).load()
    paths = default_mappings_paths() if mappings is None else list(mappings)
    return apply_mappings(settings, [load_mappings(path) for path in paths])


def resolve_base_address(
    base_address: str,
    *,
    mode: str,
    host: str | None = None,
    port: int | None = None,
) -> str:
    """Return an absolute base address.

    A relative address (such as ``/api``) is taken relative to this server's
    own HTTP address, so it only makes sense in ``http`` mode.

    Raises:
        ConfigurationError: If no address is configured, or a relative one
            is used in ``stdio`` mode.
    """
    if not base_address:
        raise ConfigurationError("No REST base address configured (rest.baseAddress)")

    if urlparse(base_address).scheme:
        return base_address

    if mode != "http":
        raise ConfigurationError(
            f"Relative base address '{base_address}' requires the http transport"
        )

    server_host = "localhost" if host in _WILDCARD_HOSTS or host is None else host
    if ":" in server_host and not server_host.startswith("["):
        server_host = f"[{server_host}]"
    authority = server_host if port is None else f"{server_host}:{port}"
    return f"http://{authority}/{base_address.lstrip('/')}"


def validate_for_startup(settings: McpifierSettings, mode: str) -> None:
    """Refuse to start a server with nothing to serve; warn on unsupported options."""
    if not settings.tools:
        raise ConfigurationError("No tools configured; add tools or a mappings file")
    if mode == "stdio" and settings.authorization.require_authorization:
        logger.warning("requireAuthorization is not supported on the stdio transport")
