"""Pending request registry for cards awaiting collaborator detail.

Keyed store of in-flight resolution requests with per-entry TTL and a size
cap. Expired entries are swept lazily on every access, so no caller ever
sees a stale request and no background timer is needed."""

from __future__ import annotations

import logging
import time
from collections import OrderedDict
from collections.abc import Callable, Iterable, Iterator
from typing import Any

from ..confidence.quality_scorer import QualityScorer
from ..core.constants import DEFAULT_PENDING_TTL_SECONDS, DEFAULT_REGISTRY_MAX_SIZE
from ..core.models import (
    Collaborator,
    PendingRequest,
    RequestKey,
    RequestState,
    as_candidate_list,
)

logger = logging.getLogger(__name__)


class PendingRequestRegistry:
    """Registry of pending requests with TTL, LRU cap and statistics"""

    def __init__(
        self,
        default_ttl: float = DEFAULT_PENDING_TTL_SECONDS,
        max_size: int = DEFAULT_REGISTRY_MAX_SIZE,
        scorer: QualityScorer | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the registry.

        Args:
            default_ttl: Lifetime of a request in seconds, reset on refresh
            max_size: Maximum live requests; the least recently refreshed is evicted
            scorer: Scorer used to keep the richer partial list on refresh
            clock: Monotonic time source
        """
        if default_ttl <= 0:
            raise ValueError(f"default_ttl must be positive, got {default_ttl}")
        if max_size < 1:
            raise ValueError(f"max_size must be >= 1, got {max_size}")

        self.default_ttl = default_ttl
        self.max_size = max_size
        self.scorer = scorer or QualityScorer()
        self._clock = clock
        self._requests: OrderedDict[RequestKey, PendingRequest] = OrderedDict()
        self._stats = {
            "registered": 0,
            "refreshed": 0,
            "removed": 0,
            "expirations": 0,
            "evictions": 0,
        }

    def register(
        self,
        key: RequestKey,
        initial_partial: Iterable[Collaborator | None] | None,
        expected_count: int = 0,
        subject_id: str = "",
        ttl: float | None = None,
    ) -> PendingRequest | None:
        """Create or refresh the pending request for a card.

        On refresh the richer partial list and the larger expected count are
        kept, a non-empty subject id replaces an empty one, and the TTL restarts.

        Returns:
            The live request, or None if the key is empty
        """
        if not key:
            logger.debug("Ignoring registration without a card key")
            return None

        self.cleanup_expired()
        now = self._clock()
        lifetime = ttl if ttl is not None and ttl > 0 else self.default_ttl
        candidates = as_candidate_list(initial_partial)
        expected = max(int(expected_count or 0), len(candidates))

        existing = self._requests.get(key)
        if existing is not None:
            if not self.scorer.is_downgrade(candidates, existing.partial_candidates):
                existing.partial_candidates = candidates
            existing.expected_count = max(existing.expected_count, expected)
            if subject_id:
                existing.subject_id = subject_id
            existing.expires_at = now + lifetime
            existing.refresh_count += 1
            self._requests.move_to_end(key)
            self._stats["refreshed"] += 1
            logger.debug(f"Refreshed pending request {key} (expected={existing.expected_count})")
            return existing

        if len(self._requests) >= self.max_size:
            oldest_key, oldest = self._requests.popitem(last=False)
            oldest.state = RequestState.EXPIRED
            self._stats["evictions"] += 1
            logger.debug(f"Registry full, evicted pending request {oldest_key}")

        request = PendingRequest(
            key=key,
            subject_id=subject_id or "",
            partial_candidates=candidates,
            expected_count=expected,
            created_at=now,
            expires_at=now + lifetime,
        )
        self._requests[key] = request
        self._stats["registered"] += 1
        logger.info(f"Registered pending request {key} (expected={expected}, partial={len(candidates)})")
        return request

    def get(self, key: RequestKey | None) -> PendingRequest | None:
        """Get a live request by key"""
        if not key:
            return None
        self.cleanup_expired()
        return self._requests.get(key)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.get(key) is not None

    def __len__(self) -> int:
        self.cleanup_expired()
        return len(self._requests)

    def all_live(self) -> Iterator[PendingRequest]:
        """Iterate live requests, oldest refresh first"""
        self.cleanup_expired()
        return iter(list(self._requests.values()))

    def find_by_subject(self, subject_id: str) -> list[PendingRequest]:
        """Live requests bound to a subject"""
        if not subject_id:
            return []
        return [request for request in self.all_live() if request.subject_id == subject_id]

    def remove(self, key: RequestKey | None, state: RequestState = RequestState.RESOLVED) -> PendingRequest | None:
        """Remove a request, recording why it left the registry"""
        if not key:
            return None
        request = self._requests.pop(key, None)
        if request is None:
            return None
        request.state = state
        self._stats["removed"] += 1
        return request

    def clear(self) -> None:
        """Clear all entries"""
        self._requests.clear()

    def cleanup_expired(self) -> int:
        """Remove expired entries and return count"""
        now = self._clock()
        expired_keys = [key for key, request in self._requests.items() if request.is_expired(now)]

        for key in expired_keys:
            request = self._requests.pop(key)
            request.state = RequestState.EXPIRED
            self._stats["expirations"] += 1
            logger.debug(f"Pending request {key} expired unresolved")

        return len(expired_keys)

    def get_stats(self) -> dict[str, Any]:
        """Get registry statistics"""
        return {
            "size": len(self._requests),
            "max_size": self.max_size,
            **self._stats,
        }
