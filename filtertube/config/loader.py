"""
ConfigLoader - resolves engine tunables from layered sources.

A key is looked up in the process environment first (CONFIG_<KEY>), then in
the overrides mapping supplied by the host (the extension's saved settings),
then on the pydantic Settings object. The first value found is coerced to
the key's type and checked against CONFIG_SCHEMA before it is returned.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any

from ..settings import Settings, get_settings
from .errors import ConfigError, MissingKeyError, UnknownKeyError, ValidationError
from .schema import CONFIG_SCHEMA, get_all_required_keys
from .types import ConfigKey

logger = logging.getLogger(__name__)


def _schema_for(key: str) -> ConfigKey:
    schema = CONFIG_SCHEMA.get(key)
    if schema is None:
        raise UnknownKeyError(f"Unknown config key: '{key}'")
    return schema


def _typed(schema: ConfigKey, raw: Any, source: str) -> Any:
    try:
        value = schema.config_type.coerce(raw)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Config key '{schema.key}' from {source} has invalid type: {e}") from e
    problem = schema.check(value)
    if problem:
        raise ValidationError(f"Config key '{schema.key}' from {source}: {problem}")
    return value


class ConfigLoader:
    """
    Layered, validated access to CONFIG_SCHEMA keys.

    Usage:
        # Once, when the host starts (fails fast on bad values)
        ConfigLoader.initialize(overrides=saved_settings)

        # Anywhere afterwards
        ttl = ConfigLoader.get_instance().get_float("collab.trigger.ttl_seconds")

        # In tests
        with ConfigLoader.use(mock_loader):
            ...
    """

    _instance: ConfigLoader | None = None
    _initialized: bool = False

    def __init__(
        self,
        settings: Settings | None = None,
        overrides: Mapping[str, Any] | None = None,
    ):
        """
        Args:
            settings: Backing Settings; the cached process settings when omitted
            overrides: Host-supplied values keyed by dot-notation key

        Raises:
            UnknownKeyError: If an override names a key outside the schema
        """
        self._settings = settings if settings is not None else get_settings()
        self._overrides: dict[str, Any] = dict(overrides or {})
        self._resolved: dict[str, Any] = {}

        unknown = sorted(key for key in self._overrides if key not in CONFIG_SCHEMA)
        if unknown:
            raise UnknownKeyError(f"Unknown config keys in overrides: {unknown}")

    # ------------------------------------------------------------------
    # Singleton management
    # ------------------------------------------------------------------

    @classmethod
    def initialize(
        cls,
        settings: Settings | None = None,
        overrides: Mapping[str, Any] | None = None,
        validate_on_init: bool = True,
    ) -> ConfigLoader:
        """Create the process-wide loader; later calls return the existing one.

        Raises:
            ConfigError: If validate_on_init is set and any key is bad
        """
        if cls._initialized and cls._instance is not None:
            logger.debug("ConfigLoader already initialized, ignoring new arguments")
            return cls._instance

        loader = cls(settings=settings, overrides=overrides)
        if validate_on_init:
            loader.validate_all()

        cls._instance = loader
        cls._initialized = True
        logger.info(f"ConfigLoader initialized with {len(loader._overrides)} host overrides")
        return loader

    @classmethod
    def get_instance(cls) -> ConfigLoader:
        """The process-wide loader, created lazily without validation."""
        if not cls._initialized or cls._instance is None:
            return cls.initialize(validate_on_init=False)
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Forget the process-wide loader. For tests."""
        cls._instance = None
        cls._initialized = False

    @classmethod
    @contextmanager
    def use(cls, loader: ConfigLoader) -> Iterator[None]:
        """Install ``loader`` as the process-wide loader for the duration of a block."""
        saved = (cls._instance, cls._initialized)
        cls._instance, cls._initialized = loader, True
        try:
            yield
        finally:
            cls._instance, cls._initialized = saved

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def validate_all(self) -> None:
        """Resolve every required key, reporting all problems at once.

        Raises:
            ConfigError: Listing every missing or invalid key
        """
        problems: list[str] = []
        required = get_all_required_keys()
        for key in required:
            try:
                self.get(key)
            except ConfigError as e:
                problems.append(str(e))

        if problems:
            raise ConfigError(f"{len(problems)} config problem(s):\n" + "\n".join(problems))
        logger.info(f"Validated {len(required)} config keys")

    def _lookup(self, schema: ConfigKey) -> tuple[Any, str]:
        from_env = os.environ.get(schema.env_var)
        if from_env is not None:
            return from_env, schema.env_var
        if self._overrides.get(schema.key) is not None:
            return self._overrides[schema.key], "overrides"
        if schema.settings_field:
            return getattr(self._settings, schema.settings_field, None), "settings"
        return None, "nowhere"

    def get(self, key: str) -> Any:
        """
        Typed value for ``key``, resolved once and then memoized.

        Raises:
            UnknownKeyError: If key is not in the schema
            MissingKeyError: If no source provides a value
            ValidationError: If the value cannot be coerced or is out of bounds
        """
        if key in self._resolved:
            return self._resolved[key]

        schema = _schema_for(key)
        raw, source = self._lookup(schema)
        if raw is None:
            raise MissingKeyError(f"Config key '{key}' has no value in environment, overrides or settings")

        value = _typed(schema, raw, source)
        self._resolved[key] = value
        return value

    def _get_or_default(self, key: str, default: Any) -> Any:
        try:
            return self.get(key)
        except (MissingKeyError, UnknownKeyError):
            if default is None:
                raise
            return default

    def get_int(self, key: str, default: int | None = None) -> int:
        return int(self._get_or_default(key, default))

    def get_float(self, key: str, default: float | None = None) -> float:
        return float(self._get_or_default(key, default))

    def get_str(self, key: str, default: str | None = None) -> str:
        return str(self._get_or_default(key, default))

    def invalidate_cache(self, key: str | None = None) -> None:
        """Drop memoized values so the next get() looks them up again."""
        if key is None:
            self._resolved.clear()
        else:
            self._resolved.pop(key, None)

    def set_override(self, key: str, value: Any) -> None:
        """
        Replace a host override at runtime, e.g. after the user edits settings.

        Raises:
            UnknownKeyError: If key is not in the schema
            ValidationError: If the value is unusable for the key
        """
        typed = _typed(_schema_for(key), value, "set_override")
        self._overrides[key] = typed
        self.invalidate_cache(key)
        logger.info(f"Config override set: {key}={typed!r}")
