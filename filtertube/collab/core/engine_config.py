"""Typed engine configuration resolved from filtertube.config."""

from __future__ import annotations

import re
from dataclasses import dataclass

from ...config import ConfigLoader
from .constants import (
    DEFAULT_DIALOG_TITLE_PATTERN,
    DEFAULT_MIN_DETAILED_COLLABORATORS,
    DEFAULT_PENDING_TTL_SECONDS,
    DEFAULT_REGISTRY_MAX_SIZE,
    DEFAULT_RESOLVED_CACHE_MAX_SIZE,
    DEFAULT_TRIGGER_TTL_SECONDS,
)


@dataclass(frozen=True)
class EngineConfig:
    """Tunables consumed by the resolution engine"""

    pending_ttl_seconds: float = DEFAULT_PENDING_TTL_SECONDS
    trigger_ttl_seconds: float = DEFAULT_TRIGGER_TTL_SECONDS
    registry_max_size: int = DEFAULT_REGISTRY_MAX_SIZE
    resolved_cache_max_size: int = DEFAULT_RESOLVED_CACHE_MAX_SIZE
    min_detailed_collaborators: int = DEFAULT_MIN_DETAILED_COLLABORATORS
    dialog_title_pattern: str = DEFAULT_DIALOG_TITLE_PATTERN

    @classmethod
    def from_loader(cls, loader: ConfigLoader | None = None) -> EngineConfig:
        """Build the engine config from a (validated) ConfigLoader.

        Raises:
            ConfigError: If any key is missing or invalid
        """
        loader = loader or ConfigLoader.get_instance()
        return cls(
            pending_ttl_seconds=loader.get_float("collab.pending.ttl_seconds"),
            trigger_ttl_seconds=loader.get_float("collab.trigger.ttl_seconds"),
            registry_max_size=loader.get_int("collab.pending.max_size"),
            resolved_cache_max_size=loader.get_int("collab.resolved.max_size"),
            min_detailed_collaborators=loader.get_int("collab.detail.min_collaborators"),
            dialog_title_pattern=loader.get_str("collab.detail.title_pattern"),
        )

    @property
    def title_regex(self) -> re.Pattern[str]:
        return re.compile(self.dialog_title_pattern, re.IGNORECASE)
