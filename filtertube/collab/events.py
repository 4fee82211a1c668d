"""Resolution events - delivery of results to consumers.

Consumers (the filtering engine, persistence) subscribe a callable and
receive every ResolutionResult in the order resolutions happen. A failing
subscriber is logged and skipped; it never affects the engine or other
subscribers."""

from __future__ import annotations

import logging
from collections.abc import Callable

from .core.models import ResolutionResult

logger = logging.getLogger(__name__)

ResolutionHandler = Callable[[ResolutionResult], None]


class ResolutionEvents:
    """Subscriber list for resolution results"""

    def __init__(self) -> None:
        self._handlers: list[ResolutionHandler] = []
        self._stats = {"emitted": 0, "handler_errors": 0}

    def subscribe(self, handler: ResolutionHandler) -> Callable[[], None]:
        """Register a handler; returns a callable that unsubscribes it"""
        if not callable(handler):
            raise TypeError(f"Resolution handler must be callable, got {type(handler).__name__}")
        self._handlers.append(handler)
        return lambda: self.unsubscribe(handler)

    def unsubscribe(self, handler: ResolutionHandler) -> bool:
        try:
            self._handlers.remove(handler)
        except ValueError:
            return False
        return True

    @property
    def subscriber_count(self) -> int:
        return len(self._handlers)

    def emit(self, result: ResolutionResult) -> int:
        """Deliver a result to every subscriber; returns successful deliveries"""
        self._stats["emitted"] += 1
        delivered = 0
        for handler in list(self._handlers):
            try:
                handler(result)
                delivered += 1
            except Exception:
                self._stats["handler_errors"] += 1
                logger.exception(f"Resolution handler {handler!r} failed for subject {result.subject_id}")
        return delivered

    def get_stats(self) -> dict[str, int]:
        return {"subscribers": len(self._handlers), **self._stats}
