# src/llm/prompts.py - v1
"""Prompt templates for completion-style models.

Llama 2 chat format::

    <s>[INST] <<SYS>>
    {system}
    <</SYS>>

    {user} [/INST] {assistant}</s><s>[INST] {user} [/INST]
"""

from __future__ import annotations

from bedrockstream.llm.models import ChatMessage

LLAMA2_START = "<s>[INST] "
LLAMA2_END = " [/INST]"


class PromptTemplateError(ValueError):
    """Raised when a conversation cannot be expressed in the prompt format."""


def build_llama2_prompt(messages: list[ChatMessage]) -> str:
    """Flatten a conversation into a single Llama 2 prompt string.

    Args:
        messages: Conversation. A system message is only allowed first.

    Returns:
        Prompt text ready for the ``prompt`` field of the request body.

    Raises:
        PromptTemplateError: On function messages or a non-leading system message.
    """
    parts: list[str] = []
    for index, message in enumerate(messages):
        content = message.text
        if message.role == "user":
            parts.append(content.strip())
        elif message.role == "assistant":
            parts.append(f" [/INST] {content}</s><s>[INST] ")
        elif message.role == "function":
            raise PromptTemplateError("Llama 2 does not support function calls.")
        elif message.role == "system" and index == 0:
            parts.append(f"<<SYS>>\n{content}\n<</SYS>>\n\n")
        else:
            raise PromptTemplateError(f"Invalid message role: {message.role}")

    return LLAMA2_START + "".join(parts) + LLAMA2_END
