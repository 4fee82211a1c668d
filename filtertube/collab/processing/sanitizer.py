"""Sanitizer - Cleans detailed collaborator lists before they are applied

Re-normalizes every identifier field, drops entries with nothing usable
left, and merges entries that describe the same channel."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from ..core.models import CandidateList, Collaborator
from ..shared.identity import collaborators_match

logger = logging.getLogger(__name__)


@dataclass
class SanitizeResult:
    """Result of sanitizing a candidate list"""

    collaborators: CandidateList
    statistics: dict[str, int] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.collaborators


def _merge(kept: Collaborator, duplicate: Collaborator) -> Collaborator:
    """Fill fields missing on the kept entry from its duplicate."""
    return Collaborator(
        name=kept.name or duplicate.name,
        handle=kept.handle or duplicate.handle,
        id=kept.id or duplicate.id,
    )


def sanitize_candidates(candidates: Iterable[Collaborator | None] | None) -> SanitizeResult:
    """Sanitize and deduplicate a candidate list, preserving first-seen order.

    Args:
        candidates: Raw detailed list from the detail layer

    Returns:
        SanitizeResult with the cleaned list and counts
    """
    kept: list[Collaborator] = []
    dropped = 0
    merged = 0
    total = 0

    for candidate in candidates or ():
        total += 1
        if not isinstance(candidate, Collaborator):
            dropped += 1
            continue

        clean = Collaborator.from_raw(name=candidate.name, handle=candidate.handle, id=candidate.id)
        if clean is None:
            dropped += 1
            continue

        for index, existing in enumerate(kept):
            if collaborators_match(existing, clean):
                kept[index] = _merge(existing, clean)
                merged += 1
                break
        else:
            kept.append(clean)

    if dropped or merged:
        logger.debug(f"Sanitized candidate list: {total} in, {len(kept)} kept, {dropped} dropped, {merged} merged")

    return SanitizeResult(
        collaborators=tuple(kept),
        statistics={
            "total_candidates": total,
            "kept": len(kept),
            "dropped": dropped,
            "merged": merged,
        },
    )
