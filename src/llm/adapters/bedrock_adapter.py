# src/llm/adapters/bedrock_adapter.py - v2
"""AWS Bedrock adapter implementing BaseChatRuntime.

Uses boto3's ``bedrock-runtime`` client and the
InvokeModelWithResponseStream operation. Two model families are served:
Anthropic Claude (messages API) and Meta Llama 2 (prompt completion).
"""

from __future__ import annotations

import asyncio
import json
import logging
from enum import Enum
from typing import Any, Callable

from pydantic import ValidationError

from bedrockstream.config.settings import load_settings
from bedrockstream.llm.anthropic_helpers import build_anthropic_messages
from bedrockstream.llm.base_client import BaseChatRuntime
from bedrockstream.llm.errors import MissingCredentialsError, ProviderInvocationError
from bedrockstream.llm.models import ChatOptions, ChatRequest, StreamCallbacks
from bedrockstream.llm.prompts import build_llama2_prompt
from bedrockstream.llm.streaming import (
    StreamingTextResponse,
    bedrock_stream,
    extract_claude_delta,
    extract_llama_generation,
    spawn_debug_drain,
    tee_stream,
)
from bedrockstream.logging.context import reset_request_context, set_request_context

logger = logging.getLogger(__name__)

PROVIDER_NAME = "bedrock"
DEFAULT_REGION = "us-east-1"
ANTHROPIC_VERSION = "bedrock-2023-05-31"
CLAUDE_DEFAULT_MAX_TOKENS = 4096
LLAMA_DEFAULT_MAX_GEN_LEN = 400
LLAMA_MODEL_PREFIX = "meta"


class ModelFamily(str, Enum):
    """Request/response dialects served by the adapter."""

    CLAUDE = "claude"
    LLAMA = "llama"

    @classmethod
    def from_model_id(cls, model_id: str) -> ModelFamily:
        """Llama for ``meta.*`` model ids, Claude for everything else."""
        if model_id.startswith(LLAMA_MODEL_PREFIX):
            return cls.LLAMA
        return cls.CLAUDE


class BedrockAdapter(BaseChatRuntime):
    """Streaming chat over AWS Bedrock."""

    def __init__(
        self,
        access_key_id: str | None = None,
        access_key_secret: str | None = None,
        region: str | None = None,
    ) -> None:
        """Initialize the Bedrock runtime client.

        Args:
            access_key_id: AWS access key id.
            access_key_secret: AWS secret access key.
            region: AWS region (defaults to us-east-1).

        Raises:
            MissingCredentialsError: If either credential is missing or empty.
        """
        if not (access_key_id and access_key_secret):
            raise MissingCredentialsError(PROVIDER_NAME)

        try:
            import boto3
        except ImportError as e:
            raise ImportError(
                "boto3 package required for Bedrock adapter: pip install boto3"
            ) from e

        self.region = region or DEFAULT_REGION
        self._client = boto3.client(
            "bedrock-runtime",
            region_name=self.region,
            aws_access_key_id=access_key_id,
            aws_secret_access_key=access_key_secret,
        )
        self._debug_tasks: set[asyncio.Task[None]] = set()

    @property
    def provider_name(self) -> str:
        return PROVIDER_NAME

    async def chat(
        self,
        request: ChatRequest,
        options: ChatOptions | None = None,
    ) -> StreamingTextResponse:
        """Stream a chat completion from the model named in ``request.model``.

        Raises:
            ProviderInvocationError: If the streaming invocation fails.
        """
        tokens = set_request_context(PROVIDER_NAME, request.model, self.region)
        try:
            family = ModelFamily.from_model_id(request.model)
            if family is ModelFamily.LLAMA:
                return await self._invoke_llama_model(request)
            return await self._invoke_claude_model(request, options)
        finally:
            reset_request_context(tokens)

    # --- Model families ---

    async def _invoke_claude_model(
        self,
        request: ChatRequest,
        options: ChatOptions | None,
    ) -> StreamingTextResponse:
        body = self._build_claude_body(request)
        debug = _debug_enabled()
        response = await self._invoke(request.model, body)
        callbacks = options.callbacks if options else None
        return self._respond(response, extract_claude_delta, debug, callbacks)

    async def _invoke_llama_model(self, request: ChatRequest) -> StreamingTextResponse:
        body = self._build_llama_body(request)
        debug = _debug_enabled()
        response = await self._invoke(request.model, body)
        return self._respond(response, extract_llama_generation, debug)

    @staticmethod
    def _build_claude_body(request: ChatRequest) -> dict[str, Any]:
        # First system message wins; any later ones are dropped
        system_message = next((m for m in request.messages if m.role == "system"), None)
        user_messages = [m for m in request.messages if m.role != "system"]

        body: dict[str, Any] = {
            "anthropic_version": ANTHROPIC_VERSION,
            "max_tokens": request.max_tokens or CLAUDE_DEFAULT_MAX_TOKENS,
            "messages": build_anthropic_messages(user_messages),
        }
        if system_message is not None:
            body["system"] = system_message.text
        if request.temperature is not None:
            body["temperature"] = request.temperature
        if request.top_p is not None:
            body["top_p"] = request.top_p
        return body

    @staticmethod
    def _build_llama_body(request: ChatRequest) -> dict[str, Any]:
        return {
            "max_gen_len": request.max_tokens or LLAMA_DEFAULT_MAX_GEN_LEN,
            "prompt": build_llama2_prompt(request.messages),
        }

    # --- Internal helpers ---

    async def _invoke(self, model: str, body: dict[str, Any]) -> dict[str, Any]:
        logger.debug("Invoking Bedrock model: model=%s, region=%s", model, self.region)
        try:
            return await asyncio.to_thread(
                self._client.invoke_model_with_response_stream,
                modelId=model,
                body=json.dumps(body),
                contentType="application/json",
                accept="application/json",
            )
        except Exception as e:
            error_name, message, metadata = _describe_error(e)
            logger.warning(
                "Bedrock invocation failed: model=%s, region=%s, error=%s",
                model, self.region, error_name,
            )
            raise ProviderInvocationError(
                provider=PROVIDER_NAME,
                region=self.region,
                message=message,
                error_name=error_name,
                metadata=metadata,
            ) from e

    def _respond(
        self,
        response: dict[str, Any],
        extract: Callable[[dict[str, Any]], str | None],
        debug: bool,
        callbacks: StreamCallbacks | None = None,
    ) -> StreamingTextResponse:
        stream = bedrock_stream(response, extract, callbacks)

        if debug:
            stream, debug_branch = tee_stream(stream)
            spawn_debug_drain(debug_branch, self._debug_tasks)

        return StreamingTextResponse(stream)


def _debug_enabled() -> bool:
    """Read DEBUG_BEDROCK_CHAT_COMPLETION for this call; invalid settings mean off."""
    try:
        return load_settings().debug_bedrock_chat_completion
    except ValidationError as e:
        logger.warning(
            "Invalid settings, debug stream disabled: %s",
            e.errors(include_url=False),
        )
        return False


def _describe_error(error: Exception) -> tuple[str, str, Any]:
    """Return (error name, message, raw response metadata) for an invocation failure.

    botocore ClientError carries the service error code, the service
    message and the ResponseMetadata block in ``error.response``.
    """
    response = getattr(error, "response", None)
    if isinstance(response, dict):
        details = response.get("Error") or {}
        return (
            details.get("Code") or type(error).__name__,
            details.get("Message") or str(error),
            response.get("ResponseMetadata"),
        )
    return type(error).__name__, str(error), None
