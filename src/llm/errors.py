# src/llm/errors.py - v1
"""Structured errors raised by chat runtimes.

Construction-time failures (missing credentials) and per-call invocation
failures share one shape so callers can serialize either for a client.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class AdapterErrorType(str, Enum):
    """Kinds of AdapterError."""

    MISSING_CREDENTIALS = "MissingCredentials"
    PROVIDER_INVOCATION_FAILURE = "ProviderInvocationFailure"


class AdapterError(Exception):
    """Error raised by a provider adapter, enriched with provider context."""

    def __init__(
        self,
        error_type: AdapterErrorType,
        provider: str,
        region: str | None = None,
        message: str | None = None,
        error_name: str | None = None,
        metadata: Any = None,
    ) -> None:
        self.error_type = error_type
        self.provider = provider
        self.region = region
        self.message = message
        self.error_name = error_name
        self.metadata = metadata
        detail = f"{error_name}: {message}" if error_name else (message or "")
        text = f"[{provider}] {error_type.value}"
        if region:
            text += f" (region={region})"
        if detail:
            text += f" - {detail}"
        super().__init__(text)

    def as_dict(self) -> dict[str, Any]:
        """JSON-able payload for returning the error to a client."""
        return {
            "errorType": self.error_type.value,
            "provider": self.provider,
            "region": self.region,
            "error": {
                "message": self.message,
                "type": self.error_name,
                "body": self.metadata,
            },
        }


class MissingCredentialsError(AdapterError):
    """Raised at construction when access key id or secret is absent."""

    def __init__(self, provider: str) -> None:
        super().__init__(AdapterErrorType.MISSING_CREDENTIALS, provider)


class ProviderInvocationError(AdapterError):
    """Raised when the upstream streaming invocation fails."""

    def __init__(
        self,
        provider: str,
        region: str | None,
        message: str,
        error_name: str,
        metadata: Any = None,
    ) -> None:
        super().__init__(
            AdapterErrorType.PROVIDER_INVOCATION_FAILURE,
            provider,
            region=region,
            message=message,
            error_name=error_name,
            metadata=metadata,
        )
