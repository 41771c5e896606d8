# src/__init__.py - v1
"""Streaming chat-completion adapter over AWS Bedrock."""

__version__ = "0.1.0"
