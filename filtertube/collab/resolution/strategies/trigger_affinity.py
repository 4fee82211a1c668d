"""Trigger affinity strategy - the card the user just opened wins.

Authoritative: if a live trigger points at a live pending request, that
request is returned without comparing any identities."""

from __future__ import annotations

import logging

from ...core.models import CandidateList
from ...data.pending_registry import PendingRequestRegistry
from ...triggers.trigger_tracker import TriggerTracker
from ..interfaces import MatchOutcome, MatchStrategy

logger = logging.getLogger(__name__)


class TriggerAffinityStrategy(MatchStrategy):
    """Match detail to the most recently triggered card"""

    def __init__(self, registry: PendingRequestRegistry, triggers: TriggerTracker):
        self.registry = registry
        self.triggers = triggers

    @property
    def name(self) -> str:
        return "trigger"

    def match(self, detailed: CandidateList) -> MatchOutcome:
        key = self.triggers.current_trigger()
        if not key:
            return MatchOutcome(method=self.name)

        request = self.registry.get(key)
        if request is None:
            logger.debug(f"Trigger {key} has no live pending request, falling back")
            return MatchOutcome(method=self.name, metadata={"stale_trigger": key})

        return MatchOutcome(request=request, method=self.name, candidates=[request])
