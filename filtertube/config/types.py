"""Typed config keys.

Each key knows how to coerce a raw value (env string, host override,
Settings attribute) into its type and which bounds the result must respect.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any


class ConfigType(Enum):
    """Value types a config key can hold."""

    INT = "int"
    FLOAT = "float"
    STRING = "string"

    def coerce(self, raw: Any) -> Any:
        """Convert ``raw`` to this type.

        Raises:
            TypeError: For booleans given to a numeric key
            ValueError: If the value cannot be parsed
        """
        if self is ConfigType.STRING:
            return str(raw)
        if isinstance(raw, bool):
            raise TypeError(f"expected {self.value}, got a boolean")
        if self is ConfigType.INT:
            return int(raw)
        return float(raw)


@dataclass(frozen=True)
class ConfigKey:
    """
    One entry of the config schema.

    Attributes:
        key: Dot-notation name, e.g. "collab.trigger.ttl_seconds"
        config_type: Type the value is coerced to
        settings_field: Settings attribute that supplies the default
        required: Whether validate_all() insists on a value
        description: Shown in error messages and docs
        min_value: Inclusive lower bound for numeric keys
        max_value: Inclusive upper bound for numeric keys
        validator: Extra predicate the coerced value must satisfy
    """

    key: str
    config_type: ConfigType
    settings_field: str | None = None
    required: bool = True
    description: str = ""
    min_value: float | None = None
    max_value: float | None = None
    validator: Callable[[Any], bool] | None = None

    @property
    def env_var(self) -> str:
        """Environment override name: collab.trigger.ttl_seconds -> CONFIG_COLLAB_TRIGGER_TTL_SECONDS"""
        return "CONFIG_" + self.key.upper().replace(".", "_")

    def check(self, value: Any) -> str | None:
        """Return a problem description for ``value``, or None when it is acceptable."""
        is_numeric = self.config_type is not ConfigType.STRING
        if is_numeric and self.min_value is not None and value < self.min_value:
            return f"{value} is below the minimum of {self.min_value}"
        if is_numeric and self.max_value is not None and value > self.max_value:
            return f"{value} is above the maximum of {self.max_value}"
        if self.validator is not None and not self.validator(value):
            return f"{value!r} is not a valid {self.description or self.key}"
        return None
