# src/llm/uri_parser.py - v1
"""Split data URIs into MIME type and base64 payload."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal
from urllib.parse import urlparse

_DATA_URI_RE = re.compile(r"^data:([^;]+);base64,(.+)$", re.DOTALL)


class InvalidDataUriError(ValueError):
    """Raised when an image reference is not a base64 data URI."""


@dataclass(frozen=True)
class ParsedUri:
    """Result of parse_data_uri."""

    type: Literal["base64", "url"] | None
    mime_type: str | None = None
    base64: str | None = None


def parse_data_uri(uri: str) -> ParsedUri:
    """Parse a data URI.

    Returns ``type="base64"`` with MIME type and payload for
    ``data:<mime>;base64,<payload>``, ``type="url"`` for an ordinary absolute
    URL, and ``type=None`` for anything else.
    """
    match = _DATA_URI_RE.match(uri)
    if match:
        return ParsedUri(type="base64", mime_type=match.group(1), base64=match.group(2))

    parsed = urlparse(uri)
    if parsed.scheme and parsed.netloc:
        return ParsedUri(type="url")
    return ParsedUri(type=None)
