"""Resolved collaborator cache with anti-downgrade protection.

Maps a subject (content item) to the best collaborator list seen so far.
A new list only replaces the cached one when its quality score is at least
as high, so resolved data never silently gets worse."""

from __future__ import annotations

import logging
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from ..confidence.quality_scorer import QualityScorer
from ..core.constants import DEFAULT_RESOLVED_CACHE_MAX_SIZE
from ..core.models import CandidateList

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CachedResolution:
    """A single cached resolution"""

    subject_id: str
    collaborators: CandidateList
    expected_count: int
    quality_score: int
    updated_at: float


class ResolvedCache:
    """Subject -> best collaborator list, bounded in LRU order"""

    def __init__(
        self,
        max_size: int = DEFAULT_RESOLVED_CACHE_MAX_SIZE,
        scorer: QualityScorer | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_size < 1:
            raise ValueError(f"max_size must be >= 1, got {max_size}")
        self.max_size = max_size
        self.scorer = scorer or QualityScorer()
        self._clock = clock
        self._entries: OrderedDict[str, CachedResolution] = OrderedDict()
        self._stats = {"hits": 0, "misses": 0, "updates": 0, "downgrades_rejected": 0, "evictions": 0}

    def get(self, subject_id: str | None) -> CandidateList | None:
        """Get the cached collaborator list for a subject"""
        entry = self.get_entry(subject_id)
        return entry.collaborators if entry else None

    def get_entry(self, subject_id: str | None) -> CachedResolution | None:
        if not subject_id or subject_id not in self._entries:
            self._stats["misses"] += 1
            return None
        self._entries.move_to_end(subject_id)
        self._stats["hits"] += 1
        return self._entries[subject_id]

    def score_of(self, subject_id: str | None) -> int:
        """Quality score of the cached list, 0 when nothing is cached"""
        if not subject_id:
            return 0
        entry = self._entries.get(subject_id)
        return entry.quality_score if entry else 0

    def would_downgrade(self, subject_id: str, collaborators: CandidateList) -> bool:
        """True if storing ``collaborators`` would lower the cached quality"""
        entry = self._entries.get(subject_id)
        if entry is None:
            return False
        return entry.quality_score > self.scorer.score(collaborators)

    def put(self, subject_id: str, collaborators: CandidateList, expected_count: int = 0) -> bool:
        """Store a resolution unless it would downgrade the cached one.

        Returns:
            True if the cache was updated
        """
        if not subject_id or not collaborators:
            return False

        if self.would_downgrade(subject_id, collaborators):
            self._stats["downgrades_rejected"] += 1
            logger.debug(
                f"Rejected downgrade for {subject_id}: cached score {self.score_of(subject_id)} "
                f"> incoming {self.scorer.score(collaborators)}"
            )
            return False

        previous = self._entries.pop(subject_id, None)
        if previous is None and len(self._entries) >= self.max_size:
            oldest_key = next(iter(self._entries))
            del self._entries[oldest_key]
            self._stats["evictions"] += 1

        self._entries[subject_id] = CachedResolution(
            subject_id=subject_id,
            collaborators=collaborators,
            expected_count=max(expected_count, len(collaborators), previous.expected_count if previous else 0),
            quality_score=self.scorer.score(collaborators),
            updated_at=self._clock(),
        )
        self._stats["updates"] += 1
        return True

    def __contains__(self, subject_id: object) -> bool:
        return isinstance(subject_id, str) and subject_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        """Clear all entries"""
        self._entries.clear()

    def get_stats(self) -> dict[str, Any]:
        """Get cache statistics"""
        lookups = self._stats["hits"] + self._stats["misses"]
        return {
            "size": len(self._entries),
            "max_size": self.max_size,
            "hit_rate": self._stats["hits"] / lookups if lookups > 0 else 0.0,
            **self._stats,
        }
