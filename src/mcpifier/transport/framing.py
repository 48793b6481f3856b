"""Request framing shared by the stdio and HTTP transports."""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import ValidationError

from mcpifier.protocols.models import JsonRpcRequest, JsonRpcResponse

logger = logging.getLogger(__name__)


def decode_request(
    payload: str | bytes,
) -> tuple[JsonRpcRequest | None, JsonRpcResponse | None]:
    """Decode one JSON-RPC message.

    Returns ``(request, None)`` on success or ``(None, error_response)``:

    * text that is not JSON, or whose root is not an object → ``Parse error``
      with ``id: null``;
    * an object that is not a well-formed request → ``Invalid Request``,
      echoing the object's ``id`` when it has one.
    """
    try:
        document: Any = json.loads(payload)
    except ValueError as exc:
        logger.warning("Failed to parse JSON-RPC message: %s", exc)
        return None, JsonRpcResponse.parse_error()

    if not isinstance(document, dict):
        logger.warning("JSON-RPC message is not an object")
        return None, JsonRpcResponse.parse_error()

    try:
        return JsonRpcRequest.model_validate(document), None
    except ValidationError as exc:
        logger.warning("Failed to deserialize JSON-RPC request: %s", exc)
        return None, JsonRpcResponse.invalid_request(document.get("id"))


def encode_response(response: JsonRpcResponse) -> str:
    """Serialize *response* as a single line of compact JSON."""
    return json.dumps(response.to_dict(), ensure_ascii=False, separators=(",", ":"))
