"""
FilterTube - content filtering for a video site.

This package contains:
- collab: collaborator identity resolution engine
- config: typed configuration registry and loader
- settings: environment-backed settings
- logging_config: unified log format
"""

from filtertube.collab import (
    Collaborator,
    CollaboratorResolutionEngine,
    EngineConfig,
    ResolutionResult,
)

__all__ = [
    "Collaborator",
    "CollaboratorResolutionEngine",
    "EngineConfig",
    "ResolutionResult",
]
