"""Engine state: pending requests, resolved subjects and the entry index"""

from __future__ import annotations

from .entry_index import EntryIndex
from .pending_registry import PendingRequestRegistry
from .resolved_cache import CachedResolution, ResolvedCache

__all__ = ["CachedResolution", "EntryIndex", "PendingRequestRegistry", "ResolvedCache"]
