"""
Layered configuration for the resolution engine.

    from filtertube.config import ConfigLoader

    ConfigLoader.initialize(overrides={"collab.trigger.ttl_seconds": 3})
    ttl = ConfigLoader.get_instance().get_float("collab.pending.ttl_seconds")
"""

from __future__ import annotations

from .errors import ConfigError, MissingKeyError, UnknownKeyError, ValidationError
from .loader import ConfigLoader
from .schema import CONFIG_SCHEMA, get_all_required_keys, get_schema_key, validate_key
from .types import ConfigKey, ConfigType

__all__ = [
    "CONFIG_SCHEMA",
    "ConfigError",
    "ConfigKey",
    "ConfigLoader",
    "ConfigType",
    "MissingKeyError",
    "UnknownKeyError",
    "ValidationError",
    "get_all_required_keys",
    "get_schema_key",
    "validate_key",
]
