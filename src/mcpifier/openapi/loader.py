"""Loading OpenAPI documents from files or URLs."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import httpx
import yaml

from mcpifier.protocols.errors import ConversionError

logger = logging.getLogger(__name__)

DOWNLOAD_TIMEOUT = 30.0


def is_url(source: str) -> bool:
    return urlparse(source).scheme in ("http", "https")


def read_source(source: str, *, timeout: float = DOWNLOAD_TIMEOUT) -> str:
    """Return the text at *source*, a local path or an http(s) URL."""
    if is_url(source):
        logger.debug("Downloading %s", source)
        try:
            response = httpx.get(source, timeout=timeout, follow_redirects=True)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise ConversionError(source, f"Cannot download document: {exc}") from exc
        return response.text

    try:
        return Path(source).read_text(encoding="utf-8")
    except OSError as exc:
        raise ConversionError(source, f"Cannot read {source}: {exc}") from exc


def parse_document(text: str, source: str = "<document>") -> dict[str, Any]:
    """Parse JSON or YAML text into an OpenAPI document mapping."""
    try:
        document: Any = json.loads(text)
    except ValueError:
        try:
            document = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConversionError(source, f"YAML parse error: {exc}") from exc

    if not isinstance(document, dict):
        raise ConversionError(source, "Document must be a mapping")
    if not isinstance(document.get("paths"), dict):
        raise ConversionError(source, "Document has no 'paths' section")
    return document


def load_document(source: str) -> dict[str, Any]:
    """Read and parse the OpenAPI (or Swagger 2.0) document at *source*."""
    logger.info("Loading OpenAPI document from '%s'", source)
    return parse_document(read_source(source), source)
