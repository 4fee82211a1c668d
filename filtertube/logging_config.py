"""
Log output for the resolution engine and the hosts that embed it.

Every line looks like:
    2026-01-06T14:05:52Z [collab] INFO Resolved 2 collaborators for abc123

LOG_LEVEL selects verbosity:
    INFO   registrations and resolutions (default)
    DEBUG  discarded detail, rejected downgrades, expirations
    TRACE  each strategy decision made by the matcher

    from filtertube.logging_config import configure_logging

    configure_logging()          # source tag from Settings.log_source
    configure_logging("popup")   # explicit source tag
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import UTC, datetime

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

_LEVELS_BY_NAME = {"TRACE": TRACE, "DEBUG": logging.DEBUG, "INFO": logging.INFO}


def _trace(self: logging.Logger, message: object, *args: object, **kwargs: object) -> None:
    if self.isEnabledFor(TRACE):
        self._log(TRACE, message, args, **kwargs)  # type: ignore[arg-type]


logging.Logger.trace = _trace  # type: ignore[attr-defined]


class ISO8601Formatter(logging.Formatter):
    """Formats records as ``<UTC timestamp> [source] LEVEL message``."""

    def __init__(self, source: str = "collab"):
        super().__init__()
        self.source = source

    def format(self, record: logging.LogRecord) -> str:
        stamp = datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")
        line = f"{stamp} [{self.source}] {record.levelname} {record.getMessage()}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def _level_from_env(debug: bool | None) -> int:
    named = _LEVELS_BY_NAME.get(os.getenv("LOG_LEVEL", "").upper())
    if named == TRACE:
        return TRACE
    if debug or named == logging.DEBUG:
        return logging.DEBUG
    return logging.INFO


def configure_logging(
    source: str | None = None,
    level: int | None = None,
    debug: bool | None = None,
) -> logging.Logger:
    """Route all logging to stdout in the unified format.

    Args:
        source: Tag shown in brackets; Settings.log_source when omitted
        level: Explicit level; otherwise derived from LOG_LEVEL and ``debug``
        debug: Force at least DEBUG verbosity

    Returns:
        The root logger
    """
    if source is None:
        from .settings import get_settings

        source = get_settings().log_source
    if level is None:
        level = _level_from_env(debug)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(ISO8601Formatter(source=source))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)
    return root


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
