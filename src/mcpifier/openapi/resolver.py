"""SchemaResolver — inlines local ``$ref`` references in an OpenAPI document.

Resolution works in place on the (already copied) document.  Every schema
node is visited once: fully resolved nodes are remembered by identity and
reused wherever they are referenced again, and a node that refers back to
one of its own ancestors has that edge pruned, so recursive models such as
trees or linked lists come out finite.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import unquote

logger = logging.getLogger(__name__)

_SINGLE_SCHEMA_KEYWORDS = ("not", "additionalProperties")
_SCHEMA_LIST_KEYWORDS = ("allOf", "anyOf", "oneOf")


class SchemaResolver:
    """Resolves references against one OpenAPI document.

    One resolver should be used for a whole document so that the memo of
    resolved schemas is shared by every operation.
    """

    def __init__(self, document: dict[str, Any]) -> None:
        self._document = document
        self._resolved: set[int] = set()

    def lookup(self, ref: str) -> Any:
        """Follow a local JSON pointer such as ``#/components/schemas/User``."""
        if not ref.startswith("#"):
            logger.warning("Skipping non-local reference %s", ref)
            return None

        node: Any = self._document
        pointer = unquote(ref[1:])
        for token in pointer.split("/")[1:] if pointer else []:
            token = token.replace("~1", "/").replace("~0", "~")
            if isinstance(node, dict) and token in node:
                node = node[token]
            elif isinstance(node, list) and token.isdigit() and int(token) < len(node):
                node = node[int(token)]
            else:
                logger.warning("Unresolvable reference %s", ref)
                return None
        return node

    def unwrap(self, node: Any) -> Any:
        """Follow ``$ref`` chains until a concrete node is reached."""
        seen: set[int] = set()
        while isinstance(node, dict) and isinstance(node.get("$ref"), str):
            if id(node) in seen:
                logger.warning("Reference loop at %s", node["$ref"])
                return None
            seen.add(id(node))
            node = self.lookup(node["$ref"])
        return node

    def resolve(self, schema: Any) -> Any:
        """Return *schema* with every nested reference inlined.

        Returns ``None`` when *schema* is missing or cannot be resolved.
        """
        return self._resolve(schema, set())

    def _resolve(self, schema: Any, ancestors: set[int]) -> Any:
        node = self.unwrap(schema)
        if isinstance(node, bool):
            return node
        if not isinstance(node, dict):
            return None

        key = id(node)
        if key in ancestors:
            logger.debug("Pruning recursive schema reference")
            return None
        if key in self._resolved:
            return node

        ancestors.add(key)

        items = node.get("items")
        if isinstance(items, list):
            self._resolve_list(node, "items", ancestors)
        elif items is not None:
            self._resolve_member(node, "items", ancestors)

        for keyword in _SINGLE_SCHEMA_KEYWORDS:
            if keyword in node:
                self._resolve_member(node, keyword, ancestors)

        properties = node.get("properties")
        if isinstance(properties, dict):
            for name in list(properties):
                self._resolve_member(properties, name, ancestors)

        for keyword in _SCHEMA_LIST_KEYWORDS:
            if isinstance(node.get(keyword), list):
                self._resolve_list(node, keyword, ancestors)

        ancestors.discard(key)
        self._resolved.add(key)
        return node

    def _resolve_member(self, parent: dict[str, Any], key: str, ancestors: set[int]) -> None:
        resolved = self._resolve(parent[key], ancestors)
        if resolved is None:
            del parent[key]
        else:
            parent[key] = resolved

    def _resolve_list(self, parent: dict[str, Any], key: str, ancestors: set[int]) -> None:
        members = [self._resolve(member, ancestors) for member in parent[key]]
        members = [member for member in members if member is not None]
        if members:
            parent[key] = members
        else:
            del parent[key]
