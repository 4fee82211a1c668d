"""Trigger tracker - the card the user just asked about.

Holds at most one trigger record. A click (or Enter/Space) on a card's
collaborator avatars is the strongest signal for which card an incoming
dialog belongs to, but only for a few seconds."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from ..core.constants import DEFAULT_TRIGGER_TTL_SECONDS
from ..core.models import RequestKey, TriggerRecord

logger = logging.getLogger(__name__)


class TriggerTracker:
    """Singleton-slot store for the most recent user trigger"""

    def __init__(
        self,
        ttl: float = DEFAULT_TRIGGER_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        if ttl <= 0:
            raise ValueError(f"ttl must be positive, got {ttl}")
        self.ttl = ttl
        self._clock = clock
        self._record: TriggerRecord | None = None

    def record_trigger(self, key: RequestKey) -> TriggerRecord | None:
        """Remember ``key`` as the latest trigger, replacing any previous one"""
        if not key:
            return None
        self._record = TriggerRecord(key=key, timestamp=self._clock())
        logger.debug(f"Recorded collaborator trigger for {key}")
        return self._record

    def current_record(self) -> TriggerRecord | None:
        if self._record is None:
            return None
        if self._clock() - self._record.timestamp >= self.ttl:
            logger.debug(f"Collaborator trigger for {self._record.key} timed out")
            self._record = None
        return self._record

    def current_trigger(self) -> RequestKey | None:
        """Key of the live trigger, or None once the TTL has elapsed"""
        record = self.current_record()
        return record.key if record else None

    def consume(self) -> RequestKey | None:
        """Clear the trigger after it has been used; returns the consumed key"""
        record = self.current_record()
        self._record = None
        return record.key if record else None

    def clear_if(self, key: RequestKey) -> bool:
        """Clear the trigger only if it points at ``key``"""
        if self._record is not None and self._record.key == key:
            self._record = None
            return True
        return False
