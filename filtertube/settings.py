"""
Engine settings using pydantic-settings for type-safe configuration.

Environment variables for the resolution engine are centralized here with
typing, validation and defaults. Settings are loaded once and cached.
"""

from __future__ import annotations

import re
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Settings loaded from environment variables (or a local .env file).

    Defaults match the behavior of the browser extension; a host can tune
    them per deployment without code changes.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # === Logging ===
    log_level: str = Field(
        default="INFO",
        description="Log level: INFO, DEBUG or TRACE",
    )
    log_source: str = Field(
        default="collab",
        description="Source tag shown in brackets in every log line",
    )

    # === Collaborator resolution ===
    collab_pending_ttl_seconds: float = Field(
        default=30.0,
        description="Lifetime of a pending request, reset on every refresh",
    )
    collab_trigger_ttl_seconds: float = Field(
        default=5.0,
        description="How long a user trigger stays authoritative for matching",
    )
    collab_registry_max_size: int = Field(
        default=500,
        description="Maximum number of pending requests kept at once",
    )
    collab_resolved_cache_max_size: int = Field(
        default=5000,
        description="Maximum number of resolved subjects kept in memory",
    )
    collab_min_detailed_collaborators: int = Field(
        default=2,
        description="Minimum detailed entries before fuzzy matching is attempted",
    )
    collab_dialog_title_pattern: str = Field(
        default="collaborator",
        description="Case-insensitive regex a dialog heading must match",
    )

    @field_validator("log_level", mode="after")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize log_level."""
        v = v.upper()
        if v not in ("INFO", "DEBUG", "TRACE"):
            raise ValueError(f"Invalid LOG_LEVEL: {v}. Must be 'INFO', 'DEBUG' or 'TRACE'")
        return v

    @field_validator("collab_pending_ttl_seconds", "collab_trigger_ttl_seconds", mode="after")
    @classmethod
    def validate_positive_ttl(cls, v: float) -> float:
        """TTLs must be strictly positive."""
        if v <= 0:
            raise ValueError(f"TTL must be positive, got {v}")
        return v

    @field_validator(
        "collab_registry_max_size",
        "collab_resolved_cache_max_size",
        "collab_min_detailed_collaborators",
        mode="after",
    )
    @classmethod
    def validate_positive_size(cls, v: int) -> int:
        """Sizes and counts must be at least 1."""
        if v < 1:
            raise ValueError(f"Value must be >= 1, got {v}")
        return v

    @field_validator("collab_dialog_title_pattern", mode="after")
    @classmethod
    def validate_title_pattern(cls, v: str) -> str:
        """Reject patterns that do not compile."""
        try:
            re.compile(v)
        except re.error as e:
            raise ValueError(f"Invalid dialog title pattern {v!r}: {e}") from e
        return v


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Settings are loaded once and cached for the lifetime of the process.
    """
    return Settings()
