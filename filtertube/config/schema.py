"""Every config key the engine understands.

Defaults live on filtertube.settings.Settings; this module only declares
types and bounds. Keys missing from CONFIG_SCHEMA are rejected everywhere.
"""

from __future__ import annotations

import re
from typing import Any

from .types import ConfigKey, ConfigType


def _compiles(pattern: Any) -> bool:
    try:
        re.compile(pattern)
    except (re.error, TypeError):
        return False
    return True


_KEYS = [
    # Pending request registry
    ConfigKey(
        key="collab.pending.ttl_seconds",
        config_type=ConfigType.FLOAT,
        settings_field="collab_pending_ttl_seconds",
        description="pending request lifetime",
        min_value=0.1,
        max_value=3600,
    ),
    ConfigKey(
        key="collab.pending.max_size",
        config_type=ConfigType.INT,
        settings_field="collab_registry_max_size",
        description="pending request cap",
        min_value=1,
        max_value=100_000,
    ),
    # Trigger tracker
    ConfigKey(
        key="collab.trigger.ttl_seconds",
        config_type=ConfigType.FLOAT,
        settings_field="collab_trigger_ttl_seconds",
        description="trigger lifetime",
        min_value=0.1,
        max_value=60,
    ),
    # Resolved cache
    ConfigKey(
        key="collab.resolved.max_size",
        config_type=ConfigType.INT,
        settings_field="collab_resolved_cache_max_size",
        description="resolved subject cap",
        min_value=1,
        max_value=1_000_000,
    ),
    # Detail guard
    ConfigKey(
        key="collab.detail.min_collaborators",
        config_type=ConfigType.INT,
        settings_field="collab_min_detailed_collaborators",
        description="minimum detailed collaborators",
        min_value=1,
        max_value=50,
    ),
    ConfigKey(
        key="collab.detail.title_pattern",
        config_type=ConfigType.STRING,
        settings_field="collab_dialog_title_pattern",
        description="dialog title regex",
        validator=_compiles,
    ),
]

CONFIG_SCHEMA: dict[str, ConfigKey] = {schema.key: schema for schema in _KEYS}


def get_schema_key(key: str) -> ConfigKey | None:
    return CONFIG_SCHEMA.get(key)


def get_all_required_keys() -> list[str]:
    """Keys validate_all() must be able to resolve."""
    return [key for key, schema in CONFIG_SCHEMA.items() if schema.required]


def validate_key(key: str, value: Any) -> str | None:
    """Check an already-typed value; returns a problem description or None."""
    schema = CONFIG_SCHEMA.get(key)
    if schema is None:
        return f"Unknown config key: {key}"
    return schema.check(value)
