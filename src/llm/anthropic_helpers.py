# src/llm/anthropic_helpers.py - v1
"""Convert unified chat messages into Anthropic messages-API payloads.

The Anthropic message list only accepts ``user`` and ``assistant`` roles.
System text travels in the separate ``system`` field, which the caller
fills; stray ``system`` and ``function`` messages are sent as ``assistant``.
"""

from __future__ import annotations

from typing import Any

from bedrockstream.llm.models import ChatMessage, ImageUrlPart, TextPart
from bedrockstream.llm.uri_parser import InvalidDataUriError, parse_data_uri

_ASSISTANT_ROLES = {"function", "system"}


def build_anthropic_block(part: Any) -> dict[str, Any] | None:
    """Map one content part to an Anthropic content block.

    Returns None for part types other than text and image_url.

    Raises:
        InvalidDataUriError: If an image URL is not a base64 data URI.
    """
    if isinstance(part, TextPart):
        return part.model_dump()

    if isinstance(part, ImageUrlPart):
        parsed = parse_data_uri(part.image_url.url)
        if parsed.type != "base64":
            raise InvalidDataUriError(
                f"Image content must be a base64 data URI, got {part.image_url.url[:64]!r}"
            )
        return {
            "type": "image",
            "source": {
                "type": "base64",
                "media_type": parsed.mime_type,
                "data": parsed.base64,
            },
        }

    return None


def build_anthropic_message(message: ChatMessage) -> dict[str, Any]:
    content = message.content
    return {
        "role": "assistant" if message.role in _ASSISTANT_ROLES else message.role,
        "content": (
            content
            if isinstance(content, str)
            else [build_anthropic_block(part) for part in content]
        ),
    }


def build_anthropic_messages(messages: list[ChatMessage]) -> list[dict[str, Any]]:
    """Convert messages one-to-one, preserving order."""
    return [build_anthropic_message(m) for m in messages]
