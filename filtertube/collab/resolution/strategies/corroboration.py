"""Corroboration strategy - fuzzy match on the primary collaborator.

Finds live pending requests whose partial candidates share an identity
with the first entry of the detailed list. When several qualify the
ranking is, in order: larger expected count, richer partial list, most
recently created request."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from ...confidence.quality_scorer import QualityScorer
from ...core.constants import DEFAULT_MIN_DETAILED_COLLABORATORS
from ...core.models import CandidateList, Collaborator, PendingRequest
from ...data.pending_registry import PendingRequestRegistry
from ...shared.identity import collaborators_match
from ..interfaces import MatchOutcome, MatchStrategy

logger = logging.getLogger(__name__)


class CorroborationStrategy(MatchStrategy):
    """Match detail to pending requests that mention its primary collaborator"""

    def __init__(
        self,
        registry: PendingRequestRegistry,
        scorer: QualityScorer | None = None,
        min_collaborators: int = DEFAULT_MIN_DETAILED_COLLABORATORS,
        channel_map: Mapping[str, str] | None = None,
    ):
        """Initialize the strategy.

        Args:
            registry: Source of live pending requests
            scorer: Scorer used for the richer-partial tie-break
            min_collaborators: Detailed lists shorter than this never match
            channel_map: Host-maintained opaque ID / handle pairs, read on every match
        """
        self.registry = registry
        self.scorer = scorer or QualityScorer()
        self.min_collaborators = min_collaborators
        self.channel_map = channel_map

    @property
    def name(self) -> str:
        return "corroboration"

    def match(self, detailed: CandidateList) -> MatchOutcome:
        if len(detailed) < self.min_collaborators:
            return MatchOutcome(
                method=self.name,
                metadata={"final": True, "reason": "too_few_collaborators"},
            )

        primary = detailed[0]
        candidates = [
            request for request in self.registry.all_live() if self._shares_identity(request.partial_candidates, primary)
        ]

        if not candidates:
            return MatchOutcome(method=self.name, metadata={"final": True, "reason": "no_candidates"})

        if len(candidates) == 1:
            return MatchOutcome(request=candidates[0], method=self.name, candidates=candidates)

        selected = self._rank(candidates)
        logger.debug(
            f"Ambiguous collaborator detail ({len(candidates)} candidates), selected {selected.key} "
            f"(expected={selected.expected_count})"
        )
        return MatchOutcome(
            request=selected,
            method=self.name,
            candidates=candidates,
            metadata={"tie_break": True},
        )

    def _shares_identity(self, partial: CandidateList, primary: Collaborator) -> bool:
        return any(collaborators_match(entry, primary, self.channel_map) for entry in partial)

    def rank_key(self, request: PendingRequest) -> tuple[int, int, float]:
        """Sort key: expected count, then partial quality, then creation time"""
        return (
            request.expected_count,
            self.scorer.score(request.partial_candidates),
            request.created_at,
        )

    def _rank(self, candidates: list[PendingRequest]) -> PendingRequest:
        # Later registrations come last in registry order; scanning in reverse
        # lets them win an exact tie on creation time.
        return max(reversed(candidates), key=self.rank_key)
