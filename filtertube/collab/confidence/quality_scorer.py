"""Quality scoring for collaborator candidate lists.

A list scores higher the more entries it has and the more identifier
fields those entries populate. The score is only used for ordering: the
resolved cache's anti-downgrade check and the matcher's tie-break."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from ..core.constants import QUALITY_WEIGHTS
from ..core.models import Collaborator

logger = logging.getLogger(__name__)


class QualityScorer:
    """Assigns a comparable richness score to a candidate list"""

    def __init__(self, weights: dict[str, int] | None = None):
        """Initialize the scorer.

        Args:
            weights: Per-entry and per-field weights; all must be positive
        """
        self.weights = {**QUALITY_WEIGHTS, **(weights or {})}
        non_positive = [name for name, weight in self.weights.items() if weight <= 0]
        if non_positive:
            raise ValueError(f"Quality weights must be positive: {non_positive}")

    def score_entry(self, collaborator: Collaborator | None) -> int:
        if collaborator is None or collaborator.is_empty:
            return 0
        entry_score = self.weights["entry"]
        if collaborator.name:
            entry_score += self.weights["name"]
        if collaborator.handle:
            entry_score += self.weights["handle"]
        if collaborator.id:
            entry_score += self.weights["id"]
        return entry_score

    def score(self, candidates: Iterable[Collaborator | None] | None) -> int:
        """Score a candidate list (empty or missing lists score 0)."""
        if not candidates:
            return 0
        return sum(self.score_entry(c) for c in candidates)

    def is_downgrade(self, incoming: Iterable[Collaborator] | None, existing: Iterable[Collaborator] | None) -> bool:
        """True if replacing ``existing`` with ``incoming`` would lose quality.

        Equal scores are not a downgrade, so newer data of the same richness wins.
        """
        return self.score(existing) > self.score(incoming)


_default_scorer = QualityScorer()


def score(candidates: Iterable[Collaborator | None] | None) -> int:
    """Score a candidate list with the default weights."""
    return _default_scorer.score(candidates)
