"""Resolution propagation"""

from __future__ import annotations

from .propagator import Propagator

__all__ = ["Propagator"]
