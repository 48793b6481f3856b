"""Schema — a JSON Schema kept in raw wire form plus a lazily compiled validator.

The raw dict is what goes over the wire (``inputSchema``/``outputSchema``);
the compiled :mod:`jsonschema` validator is derived from it on first use and
cached.  Compilation is compute-once under a lock so concurrent first callers
never race, while later reads take the unlocked fast path.
"""

from __future__ import annotations

import threading
from typing import Any

from jsonschema.protocols import Validator
from jsonschema.validators import validator_for

_DEFAULT_SCHEMA: dict[str, Any] = {"type": "object"}


class Schema:
    """Raw JSON Schema with a cached, thread-safe compiled form."""

    def __init__(self, raw: dict[str, Any] | None = None) -> None:
        self._lock = threading.Lock()
        self._raw: dict[str, Any] = dict(_DEFAULT_SCHEMA) if raw is None else raw
        self._compiled: Validator | None = None

    @property
    def raw(self) -> dict[str, Any]:
        """The wire-exact schema."""
        return self._raw

    @raw.setter
    def raw(self, value: dict[str, Any]) -> None:
        with self._lock:
            self._raw = value
            self._compiled = None

    @property
    def validator(self) -> Validator:
        """The compiled validator for the current raw schema."""
        compiled = self._compiled
        if compiled is not None:
            return compiled
        with self._lock:
            if self._compiled is None:
                cls = validator_for(self._raw)
                cls.check_schema(self._raw)
                self._compiled = cls(self._raw)
            return self._compiled

    def validate(self, instance: Any) -> tuple[bool, str | None]:
        """Evaluate *instance* and return ``(is_valid, joined_error_message)``."""
        errors = sorted(self.validator.iter_errors(instance), key=lambda e: e.json_path)
        if not errors:
            return True, None

        messages = [f"{error.json_path}: {error.message}" for error in errors]
        return False, "; ".join(messages)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Schema):
            return NotImplemented
        return self._raw == other._raw

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Schema({self._raw!r})"
