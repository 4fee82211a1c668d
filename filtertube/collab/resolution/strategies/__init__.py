"""Match strategies"""

from __future__ import annotations

from .corroboration import CorroborationStrategy
from .trigger_affinity import TriggerAffinityStrategy

__all__ = ["CorroborationStrategy", "TriggerAffinityStrategy"]
