"""Exceptions raised by filtertube.config.

Configuration problems surface when the engine is built, never while it
handles events.
"""

from __future__ import annotations


class ConfigError(Exception):
    """Any configuration problem."""


class MissingKeyError(ConfigError):
    """No source supplied a value for a required key."""


class ValidationError(ConfigError):
    """A value could not be coerced or is out of bounds."""


class UnknownKeyError(ConfigError):
    """The key is not part of CONFIG_SCHEMA."""
