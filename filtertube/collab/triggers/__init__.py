"""User trigger tracking"""

from __future__ import annotations

from .trigger_tracker import TriggerTracker

__all__ = ["TriggerTracker"]
