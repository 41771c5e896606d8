# tests/conftest.py - v1
"""Shared test fixtures for unit and integration tests.

Provides canned Bedrock stream events, a mocked bedrock-runtime client and
an adapter bound to it. No network access: boto3.client is patched.
"""

from __future__ import annotations

import json
from typing import Any, Callable
from unittest.mock import MagicMock, patch

import pytest

from bedrockstream.llm.adapters.bedrock_adapter import BedrockAdapter
from bedrockstream.logging.context import clear_context


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path):
    """Keep .env files and the debug toggle of the host out of the tests."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("DEBUG_BEDROCK_CHAT_COMPLETION", raising=False)
    clear_context()
    yield
    clear_context()


# === FIXTURES: Stream events ===


@pytest.fixture
def claude_chunks() -> list[dict[str, Any]]:
    """Decoded messages-API stream events for the reply 'Hello world'."""
    return [
        {"type": "message_start", "message": {"role": "assistant", "content": []}},
        {"type": "content_block_start", "index": 0, "content_block": {"type": "text", "text": ""}},
        {"type": "content_block_delta", "index": 0, "delta": {"type": "text_delta", "text": "Hello"}},
        {"type": "content_block_delta", "index": 0, "delta": {"type": "text_delta", "text": " world"}},
        {"type": "content_block_stop", "index": 0},
        {"type": "message_delta", "delta": {"stop_reason": "end_turn"}, "usage": {"output_tokens": 2}},
        {"type": "message_stop"},
    ]


@pytest.fixture
def llama_chunks() -> list[dict[str, Any]]:
    """Decoded Llama 2 stream events for the reply 'Hi there'."""
    return [
        {"generation": "Hi", "stop_reason": None},
        {"generation": " there", "stop_reason": None},
        {"generation": "", "stop_reason": "stop"},
    ]


@pytest.fixture
def make_stream_response() -> Callable[[list[dict[str, Any]]], dict[str, Any]]:
    """Build an invoke_model_with_response_stream return value from decoded chunks."""

    def _make(chunks: list[dict[str, Any]]) -> dict[str, Any]:
        events = [{"chunk": {"bytes": json.dumps(c).encode("utf-8")}} for c in chunks]
        return {"body": iter(events), "contentType": "application/json"}

    return _make


# === FIXTURES: Mock client ===


@pytest.fixture
def mock_bedrock_client() -> MagicMock:
    """Stand-in for boto3.client('bedrock-runtime')."""
    return MagicMock()


@pytest.fixture
def bedrock_adapter(mock_bedrock_client: MagicMock) -> BedrockAdapter:
    """BedrockAdapter wired to the mocked client."""
    with patch("boto3.client", return_value=mock_bedrock_client):
        return BedrockAdapter(
            access_key_id="AKIAEXAMPLE",
            access_key_secret="secret",
            region="us-west-2",
        )


def sent_body(client: MagicMock) -> dict[str, Any]:
    """Decode the JSON body of the last invoke call."""
    return json.loads(client.invoke_model_with_response_stream.call_args.kwargs["body"])


@pytest.fixture
def last_body() -> Callable[[MagicMock], dict[str, Any]]:
    return sent_body
