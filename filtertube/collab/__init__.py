"""Collaborator identity resolution.

Reconciles partial collaborator data scraped from rendered cards with the
detailed list shown in the collaborator dialog, so content can be filtered
by any of its collaborators' channels."""

from __future__ import annotations

from .core.engine_config import EngineConfig
from .core.models import (
    CandidateList,
    Collaborator,
    PendingRequest,
    RequestState,
    ResolutionResult,
    TriggerRecord,
)
from .engine import CollaboratorResolutionEngine
from .shared.identity import normalize_handle

__all__ = [
    "CandidateList",
    "Collaborator",
    "CollaboratorResolutionEngine",
    "EngineConfig",
    "PendingRequest",
    "RequestState",
    "ResolutionResult",
    "TriggerRecord",
    "normalize_handle",
]
