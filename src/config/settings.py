# src/config/settings.py - v2
"""Typed configuration loaded from .env via pydantic-settings.

Only process-wide toggles live here. Credentials and region are passed to
the adapter programmatically and are never read from the environment.
"""

from __future__ import annotations

from typing import Literal

from pydantic import ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from .env file and environment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
    )

    # === Diagnostics ===
    # DEBUG_BEDROCK_CHAT_COMPLETION=1 drains a copy of every stream to the log
    debug_bedrock_chat_completion: bool = False

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "text"] = "json"

    # --- Validators ---

    @field_validator("log_level", "log_format", mode="before")
    @classmethod
    def normalize_case(cls, v: object, info: ValidationInfo) -> object:
        """LOG_LEVEL is upper case, LOG_FORMAT lower case, whatever was typed."""
        if not isinstance(v, str):
            return v
        v = v.strip()
        return v.upper() if info.field_name == "log_level" else v.lower()


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing).

    Returns:
        Validated Settings instance.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
