"""Configuration — settings and mappings files."""

from mcpifier.config.loader import (
    DEFAULT_MAPPINGS_FILE,
    SettingsLoader,
    apply_mappings,
    load_mappings,
    load_settings,
    read_document,
    resolve_base_address,
    validate_for_startup,
)
from mcpifier.config.models import (
    AuthorizationSettings,
    HttpSettings,
    Mappings,
    MappingsDocument,
    McpifierSettings,
    ProtectedResourceMetadata,
    RestSettings,
)

__all__ = [
    "DEFAULT_MAPPINGS_FILE",
    "AuthorizationSettings",
    "HttpSettings",
    "Mappings",
    "MappingsDocument",
    "McpifierSettings",
    "ProtectedResourceMetadata",
    "RestSettings",
    "SettingsLoader",
    "apply_mappings",
    "load_mappings",
    "load_settings",
    "read_document",
    "resolve_base_address",
    "validate_for_startup",
]
