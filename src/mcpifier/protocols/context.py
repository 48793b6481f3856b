"""Request-scoped context shared between transports and handlers.

The HTTP transport records the inbound headers that should be forwarded to
the REST API; ``tools/call`` reads them back.  Each asyncio task sees its own
value, so concurrent HTTP requests never observe each other's headers.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar

_forwarded_headers: ContextVar[Mapping[str, str] | None] = ContextVar(
    "mcpifier_forwarded_headers", default=None
)


def get_forwarded_headers() -> dict[str, str]:
    """Return the headers to forward for the current request (possibly empty)."""
    headers = _forwarded_headers.get()
    return dict(headers) if headers else {}


@contextmanager
def forwarded_headers(headers: Mapping[str, str]) -> Iterator[None]:
    """Make *headers* the forwarded headers for the enclosed block."""
    token = _forwarded_headers.set(dict(headers))
    try:
        yield
    finally:
        _forwarded_headers.reset(token)
