"""Mcpifier — expose REST APIs as Model Context Protocol tools."""

from __future__ import annotations

__version__ = "0.1.0"
