"""Interfaces for the resolution matcher.

Defines contracts for match strategies and their outcomes."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from ..core.models import CandidateList, PendingRequest


@dataclass
class MatchOutcome:
    """Result of a match attempt"""

    request: PendingRequest | None = None
    method: str = "none"
    candidates: list[PendingRequest] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def is_matched(self) -> bool:
        """Check if a pending request was selected"""
        return self.request is not None

    @property
    def is_ambiguous(self) -> bool:
        """Check if more than one request was plausible"""
        return len(self.candidates) > 1

    @property
    def is_final(self) -> bool:
        """A final outcome stops the pipeline even without a match"""
        return bool(self.metadata.get("final", False))


class MatchStrategy(ABC):
    """Base class for match strategies"""

    @abstractmethod
    def match(self, detailed: CandidateList) -> MatchOutcome:
        """Attempt to find the pending request a detailed list belongs to.

        Args:
            detailed: Detailed candidate list observed in a dialog

        Returns:
            MatchOutcome with the selected request, if any
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Strategy name for logging and debugging"""
        pass
