"""Collaborator identity resolution engine.

Entry points used by the extension's content layer:
- observe_partial(): a card rendered with several collaborators
- record_trigger(): the user opened the collaborator dialog from a card
- observe_detailed() / observe_dialog(): the dialog rendered its full list
- on_resolved(): subscribe to resolution results

All entry points are synchronous, run in arrival order under one lock, and
never raise on bad input; failures degrade to "unresolved"."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from ..config import ConfigLoader
from .confidence.quality_scorer import QualityScorer
from .core.engine_config import EngineConfig
from .core.models import (
    CandidateList,
    Collaborator,
    PendingRequest,
    RequestKey,
    RequestState,
    ResolutionResult,
    as_candidate_list,
)
from .data.entry_index import EntryIndex
from .data.pending_registry import PendingRequestRegistry
from .data.resolved_cache import ResolvedCache
from .events import ResolutionEvents, ResolutionHandler
from .propagation.propagator import Propagator
from .resolution.matcher import ResolutionMatcher
from .resolution.strategies import CorroborationStrategy, TriggerAffinityStrategy
from .triggers.trigger_tracker import TriggerTracker

logger = logging.getLogger(__name__)


class CollaboratorResolutionEngine:
    """Owns the registry, trigger, cache and event state for one host"""

    def __init__(
        self,
        config: EngineConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
        scorer: QualityScorer | None = None,
        channel_map: Mapping[str, str] | None = None,
    ):
        """Initialize the engine.

        Args:
            config: Engine tunables (defaults if omitted)
            clock: Monotonic time source shared by every component
            scorer: Quality scorer shared by registry, cache and matcher
            channel_map: Known opaque ID / handle pairs, keyed lowercase; kept by
                reference so later host updates take effect
        """
        self.config = config or EngineConfig()
        self.scorer = scorer or QualityScorer()
        self._lock = threading.RLock()

        self.registry = PendingRequestRegistry(
            default_ttl=self.config.pending_ttl_seconds,
            max_size=self.config.registry_max_size,
            scorer=self.scorer,
            clock=clock,
        )
        self.triggers = TriggerTracker(ttl=self.config.trigger_ttl_seconds, clock=clock)
        self.resolved_cache = ResolvedCache(
            max_size=self.config.resolved_cache_max_size,
            scorer=self.scorer,
            clock=clock,
        )
        self.entries = EntryIndex(max_entries=self.config.resolved_cache_max_size)
        self.events = ResolutionEvents()

        self.matcher = ResolutionMatcher(
            [
                TriggerAffinityStrategy(self.registry, self.triggers),
                CorroborationStrategy(
                    self.registry,
                    scorer=self.scorer,
                    min_collaborators=self.config.min_detailed_collaborators,
                    channel_map=channel_map,
                ),
            ]
        )
        self.propagator = Propagator(self.registry, self.resolved_cache, self.events, self.entries)
        self._title_regex = self.config.title_regex

        self._stats = {
            "partials_observed": 0,
            "triggers_recorded": 0,
            "triggers_ignored": 0,
            "details_observed": 0,
            "dialogs_rejected": 0,
            "unmatched_details": 0,
            "cancelled": 0,
            "errors": 0,
        }

    @classmethod
    def from_config(cls, loader: ConfigLoader | None = None, **kwargs: Any) -> CollaboratorResolutionEngine:
        """Build an engine from filtertube.config (raises ConfigError on bad config)"""
        return cls(config=EngineConfig.from_loader(loader), **kwargs)

    # ------------------------------------------------------------------
    # Producers
    # ------------------------------------------------------------------

    def observe_partial(
        self,
        card_key: RequestKey,
        candidates: Iterable[Collaborator | None] | None,
        expected_count: int = 0,
        subject_id: str = "",
    ) -> PendingRequest | None:
        """Register (or refresh) a card that shows several collaborators.

        Args:
            card_key: Identity of the rendered card instance
            candidates: Partial collaborator list scraped from the card
            expected_count: Best estimate of the total number of collaborators
            subject_id: Content item the card shows, if already known

        Returns:
            The live pending request, or None if the input was unusable
        """
        with self._lock:
            try:
                self._stats["partials_observed"] += 1
                request = self.registry.register(card_key, candidates, expected_count, subject_id=subject_id)
                if request is not None and request.subject_id:
                    self.entries.bind(card_key, request.subject_id)
                return request
            except Exception:
                self._stats["errors"] += 1
                logger.exception(f"Failed to observe partial collaborators for {card_key!r}")
                return None

    def record_trigger(self, card_key: RequestKey) -> bool:
        """Record a user interaction asking for a card's collaborator detail.

        Only cards with a live pending request can be triggered.
        """
        with self._lock:
            try:
                if not card_key or self.registry.get(card_key) is None:
                    self._stats["triggers_ignored"] += 1
                    logger.debug(f"Ignoring trigger for untracked card {card_key!r}")
                    return False
                self.triggers.record_trigger(card_key)
                self._stats["triggers_recorded"] += 1
                return True
            except Exception:
                self._stats["errors"] += 1
                logger.exception(f"Failed to record trigger for {card_key!r}")
                return False

    def observe_detailed(self, candidates: Iterable[Collaborator | None] | None) -> ResolutionResult | None:
        """Route a detailed collaborator list to its pending request and apply it.

        Returns:
            The emitted ResolutionResult, or None when nothing was resolved
        """
        with self._lock:
            try:
                self._stats["details_observed"] += 1
                detailed: CandidateList = as_candidate_list(candidates)
                outcome = self.matcher.match_with_outcome(detailed)
                if outcome.request is None:
                    self._stats["unmatched_details"] += 1
                    logger.debug(
                        f"Discarding collaborator detail ({len(detailed)} entries): "
                        f"{outcome.metadata.get('reason', 'unmatched')}"
                    )
                    return None

                result = self.propagator.resolve(outcome.request, detailed)
                if result is not None:
                    trigger_key = self.triggers.current_trigger()
                    if trigger_key and trigger_key in result.entry_keys:
                        self.triggers.consume()
                return result
            except Exception:
                self._stats["errors"] += 1
                logger.exception("Failed to apply collaborator detail")
                return None

    def observe_dialog(
        self,
        title: str | None,
        candidates: Iterable[Collaborator | None] | None,
    ) -> ResolutionResult | None:
        """Guarded entry point for a rendered disambiguation dialog.

        A dialog is ignored when its heading does not look like a collaborator
        list or when it carries too few entries to need disambiguation.
        """
        with self._lock:
            try:
                detailed = as_candidate_list(candidates)
                if title and not self._title_regex.search(title):
                    self._stats["dialogs_rejected"] += 1
                    logger.debug(f"Ignoring dialog with unrelated title {title!r}")
                    return None
                if len(detailed) < self.config.min_detailed_collaborators:
                    self._stats["dialogs_rejected"] += 1
                    logger.debug(f"Ignoring dialog with {len(detailed)} collaborators")
                    return None
            except Exception:
                self._stats["errors"] += 1
                logger.exception("Failed to inspect collaborator dialog")
                return None
            return self.observe_detailed(detailed)

    def cancel(self, card_key: RequestKey) -> bool:
        """Explicitly drop a pending request (e.g., the card left the page)"""
        with self._lock:
            try:
                removed = self.registry.remove(card_key, RequestState.CANCELLED)
                if removed is None:
                    return False
                self.triggers.clear_if(card_key)
                self._stats["cancelled"] += 1
                logger.debug(f"Cancelled pending request {card_key}")
                return True
            except Exception:
                self._stats["errors"] += 1
                logger.exception(f"Failed to cancel pending request {card_key!r}")
                return False

    # ------------------------------------------------------------------
    # Consumers
    # ------------------------------------------------------------------

    def on_resolved(self, handler: ResolutionHandler) -> Callable[[], None]:
        """Subscribe to resolution results; returns an unsubscribe callable"""
        return self.events.subscribe(handler)

    def get_resolved(self, subject_id: str) -> CandidateList | None:
        """Best collaborator list resolved so far for a subject"""
        with self._lock:
            return self.resolved_cache.get(subject_id)

    def get_stats(self) -> dict[str, Any]:
        """Get statistics for every component"""
        with self._lock:
            return {
                "engine": dict(self._stats),
                "registry": self.registry.get_stats(),
                "resolved_cache": self.resolved_cache.get_stats(),
                "entries": self.entries.get_stats(),
                "propagator": self.propagator.get_stats(),
                "events": self.events.get_stats(),
            }
