"""ToolRegistry — the immutable, name-keyed set of tool mappings."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType

from mcpifier.protocols.models import ToolMapping


def merge_tools(
    base: Iterable[ToolMapping], override: Iterable[ToolMapping]
) -> list[ToolMapping]:
    """Union *override* and *base* by tool name, preferring *override*.

    Override entries come first, in their own order; base entries follow
    when their name is not already taken.  Within either sequence the first
    entry for a name wins.
    """
    merged: dict[str, ToolMapping] = {}
    for tool in (*override, *base):
        merged.setdefault(tool.name, tool)
    return list(merged.values())


class ToolRegistry(Mapping[str, ToolMapping]):
    """Read-only mapping of tool name to :class:`ToolMapping`.

    Built once at startup and shared by every request; lookups are
    case-sensitive and iteration follows insertion order.
    """

    def __init__(self, tools: Iterable[ToolMapping] = ()) -> None:
        by_name: dict[str, ToolMapping] = {}
        for tool in tools:
            by_name.setdefault(tool.name, tool)
        self._tools = MappingProxyType(by_name)

    @classmethod
    def merged(
        cls, base: Iterable[ToolMapping], override: Iterable[ToolMapping]
    ) -> ToolRegistry:
        return cls(merge_tools(base, override))

    def __getitem__(self, name: str) -> ToolMapping:
        return self._tools[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._tools)

    def __len__(self) -> int:
        return len(self._tools)

    def __repr__(self) -> str:
        return f"ToolRegistry({list(self._tools)!r})"
