"""Quality scoring module"""

from __future__ import annotations

from .quality_scorer import QualityScorer, score

__all__ = ["QualityScorer", "score"]
