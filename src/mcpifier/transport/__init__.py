"""Transports — stdio and HTTP front ends over the JSON-RPC dispatcher."""

from mcpifier.transport.framing import decode_request, encode_response
from mcpifier.transport.http import create_app
from mcpifier.transport.stdio import StdioServer, open_stdio

__all__ = ["StdioServer", "create_app", "decode_request", "encode_response", "open_stdio"]
