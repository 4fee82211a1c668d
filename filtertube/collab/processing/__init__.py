"""Candidate list processing"""

from __future__ import annotations

from .sanitizer import SanitizeResult, sanitize_candidates

__all__ = ["SanitizeResult", "sanitize_candidates"]
