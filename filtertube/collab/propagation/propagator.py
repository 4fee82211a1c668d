"""Propagator - applies a matched detail list and announces the result.

Sanitizes the detailed list, enforces anti-downgrade against the resolved
cache, removes the originating request and every sibling request for the
same subject from the registry, and emits one ResolutionResult naming all
entries it applies to."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from ..core.models import Collaborator, PendingRequest, RequestState, ResolutionResult
from ..data.entry_index import EntryIndex
from ..data.pending_registry import PendingRequestRegistry
from ..data.resolved_cache import ResolvedCache
from ..events import ResolutionEvents
from ..processing.sanitizer import sanitize_candidates

logger = logging.getLogger(__name__)


class Propagator:
    """Applies resolutions to the cache, the registry and subscribers"""

    def __init__(
        self,
        registry: PendingRequestRegistry,
        cache: ResolvedCache,
        events: ResolutionEvents,
        entries: EntryIndex | None = None,
    ):
        self.registry = registry
        self.cache = cache
        self.events = events
        self.entries = entries or EntryIndex()
        self._stats = {"resolved": 0, "empty_after_sanitize": 0, "downgrades_rejected": 0}

    def resolve(self, request: PendingRequest, detailed: Iterable[Collaborator | None] | None) -> ResolutionResult | None:
        """Resolve a pending request with a detailed collaborator list.

        Returns:
            The emitted ResolutionResult, or None when nothing was applied
        """
        sanitized = sanitize_candidates(detailed)
        if sanitized.is_empty:
            self._stats["empty_after_sanitize"] += 1
            logger.debug(f"Detail for {request.key} had no usable collaborators, not applied")
            return None

        collaborators = sanitized.collaborators
        subject_key = request.subject_key

        if self.cache.would_downgrade(subject_key, collaborators):
            self._stats["downgrades_rejected"] += 1
            logger.debug(
                f"Keeping cached collaborators for {subject_key}: "
                f"score {self.cache.score_of(subject_key)} beats incoming detail"
            )
            return None

        expected_count = max(request.expected_count, len(collaborators))
        self.cache.put(subject_key, collaborators, expected_count)

        self.entries.bind(request.key, subject_key)
        entry_keys = [request.key]
        for sibling_key in self.entries.siblings(subject_key):
            if sibling_key not in entry_keys:
                entry_keys.append(sibling_key)

        for key in entry_keys:
            self.registry.remove(key, RequestState.RESOLVED)

        result = ResolutionResult(
            subject_id=subject_key,
            collaborators=collaborators,
            expected_count=expected_count,
            quality_score=self.cache.score_of(subject_key),
            entry_keys=tuple(entry_keys),
        )
        self._stats["resolved"] += 1
        logger.info(
            f"Resolved {len(collaborators)} collaborators for {subject_key} "
            f"across {len(entry_keys)} entries (score={result.quality_score})"
        )

        self.events.emit(result)
        return result

    def get_stats(self) -> dict[str, Any]:
        return dict(self._stats)
