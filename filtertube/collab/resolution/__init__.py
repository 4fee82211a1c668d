"""Resolution matcher for collaborator detail.

Provides interfaces and strategies for routing a detailed collaborator
list to the pending request it belongs to."""

from __future__ import annotations

from .interfaces import MatchOutcome, MatchStrategy
from .matcher import ResolutionMatcher
from .strategies import CorroborationStrategy, TriggerAffinityStrategy

__all__ = [
    "MatchOutcome",
    "MatchStrategy",
    "ResolutionMatcher",
    "CorroborationStrategy",
    "TriggerAffinityStrategy",
]
