# src/llm/base_client.py - v2
"""Abstract chat runtime interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from bedrockstream.llm.models import ChatOptions, ChatRequest

if TYPE_CHECKING:
    from bedrockstream.llm.streaming import StreamingTextResponse


class BaseChatRuntime(ABC):
    """Unified streaming chat interface for all providers."""

    @abstractmethod
    async def chat(
        self,
        request: ChatRequest,
        options: ChatOptions | None = None,
    ) -> StreamingTextResponse:
        """Start a streaming chat completion and return the text stream."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier (e.g. bedrock)."""
