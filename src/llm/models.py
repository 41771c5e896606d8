# src/llm/models.py - v2
"""Chat types: ChatMessage, content parts, ChatRequest, ChatOptions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, Any, Callable, Literal, Union

from pydantic import BaseModel, Field


class TextPart(BaseModel):
    """Plain text content part."""

    type: Literal["text"] = "text"
    text: str


class ImageUrl(BaseModel):
    url: str


class ImageUrlPart(BaseModel):
    """Image content part. The URL is expected to be a base64 data URI."""

    type: Literal["image_url"] = "image_url"
    image_url: ImageUrl


ContentPart = Annotated[Union[TextPart, ImageUrlPart], Field(discriminator="type")]


class ChatMessage(BaseModel):
    """Single message in a conversation."""

    role: Literal["system", "user", "assistant", "function"]
    content: str | list[ContentPart]

    @property
    def text(self) -> str:
        """Content as plain text; image parts are left out."""
        if isinstance(self.content, str):
            return self.content
        return "".join(p.text for p in self.content if isinstance(p, TextPart))


class ChatRequest(BaseModel):
    """Unified chat-completion request."""

    model: str
    messages: list[ChatMessage]
    max_tokens: int | None = None
    temperature: float | None = None
    top_p: float | None = None


@dataclass
class StreamCallbacks:
    """Hooks invoked while a stream is being consumed.

    Each hook may be a plain function or a coroutine function.
    """

    on_start: Callable[[], Any] | None = None
    on_token: Callable[[str], Any] | None = None
    on_text: Callable[[str], Any] | None = None
    on_completion: Callable[[str], Any] | None = None
    on_final: Callable[[str], Any] | None = None


@dataclass
class ChatOptions:
    """Per-call options for BaseChatRuntime.chat()."""

    callbacks: StreamCallbacks | None = None
