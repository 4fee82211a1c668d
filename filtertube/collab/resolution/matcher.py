"""Resolution matcher for routing detailed collaborator lists.

Runs match strategies in order. Trigger affinity comes first and is
authoritative; fuzzy corroboration only runs when no live trigger applies."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from ...logging_config import TRACE
from ..core.models import CandidateList, Collaborator, PendingRequest, as_candidate_list
from .interfaces import MatchOutcome, MatchStrategy

logger = logging.getLogger(__name__)


class ResolutionMatcher:
    """Orchestrates match strategies"""

    def __init__(self, strategies: Iterable[MatchStrategy] | None = None):
        self.strategies: list[MatchStrategy] = list(strategies or [])

    def add_strategy(self, strategy: MatchStrategy) -> None:
        """Add a match strategy to the end of the pipeline"""
        self.strategies.append(strategy)

    def match(self, detailed: Iterable[Collaborator | None] | None) -> PendingRequest | None:
        """Pending request the detailed list belongs to, or None"""
        return self.match_with_outcome(detailed).request

    def match_with_outcome(self, detailed: Iterable[Collaborator | None] | None) -> MatchOutcome:
        """Run the strategies and return the deciding outcome.

        Args:
            detailed: Detailed candidate list observed in a dialog

        Returns:
            The first matched or final outcome, or an empty outcome
        """
        candidates: CandidateList = as_candidate_list(detailed)
        if not candidates:
            return MatchOutcome(metadata={"reason": "empty_detail"})

        for strategy in self.strategies:
            outcome = strategy.match(candidates)
            logger.log(
                TRACE,
                f"Strategy {strategy.name}: matched={outcome.is_matched} candidates={len(outcome.candidates)}",
            )
            if outcome.is_matched or outcome.is_final:
                return outcome

        return MatchOutcome(metadata={"reason": "no_strategy_matched"})
