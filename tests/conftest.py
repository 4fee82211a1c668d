"""
Shared fixtures for the FilterTube test suite.

- clock: a FakeClock so every TTL in the engine is deterministic
- engine: a CollaboratorResolutionEngine with default tunables on that clock
- make_collaborator: builds canonical collaborators from raw strings
- mock_config: a dictionary-backed ConfigLoader singleton
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Add project root to path to allow imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from filtertube.collab.core.engine_config import EngineConfig  # noqa: E402
from filtertube.collab.core.models import Collaborator  # noqa: E402
from filtertube.collab.engine import CollaboratorResolutionEngine  # noqa: E402


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now


@pytest.fixture
def clock():
    """A fake clock starting at t=1000s."""
    return FakeClock()


@pytest.fixture
def engine(clock):
    """An engine with default tunables driven by the fake clock."""
    return CollaboratorResolutionEngine(config=EngineConfig(), clock=clock)


@pytest.fixture
def make_collaborator():
    """Factory for collaborators built like the extraction layer builds them."""

    def _make(name: str | None = None, handle: str | None = None, id: str | None = None) -> Collaborator:
        collaborator = Collaborator.from_raw(name=name, handle=handle, id=id)
        assert collaborator is not None
        return collaborator

    return _make


# =============================================================================
# Configuration Fixtures
# =============================================================================

# Same values Settings produces with an empty environment
TEST_CONFIG: dict[str, object] = {
    "collab.pending.ttl_seconds": 30.0,
    "collab.pending.max_size": 500,
    "collab.trigger.ttl_seconds": 5.0,
    "collab.resolved.max_size": 5000,
    "collab.detail.min_collaborators": 2,
    "collab.detail.title_pattern": "collaborator",
}


class MockConfigLoader:
    """Dictionary-backed stand-in for ConfigLoader; tests edit ``values`` directly."""

    def __init__(self, values: dict[str, object] | None = None):
        self.values = dict(TEST_CONFIG if values is None else values)

    def get(self, key: str) -> object:
        return self.values[key]

    def get_int(self, key: str, default: int | None = None) -> int:
        return int(self.values.get(key, default))  # type: ignore[arg-type]

    def get_float(self, key: str, default: float | None = None) -> float:
        return float(self.values.get(key, default))  # type: ignore[arg-type]

    def get_str(self, key: str, default: str | None = None) -> str:
        return str(self.values.get(key, default))


@pytest.fixture
def mock_config():
    """MockConfigLoader installed as the ConfigLoader singleton for one test."""
    from filtertube.config import ConfigLoader

    loader = MockConfigLoader()
    with ConfigLoader.use(loader):  # type: ignore[arg-type]
        yield loader


@pytest.fixture(autouse=True)
def reset_config_singleton():
    """Each test starts without a ConfigLoader singleton or cached Settings."""
    yield
    from filtertube.config import ConfigLoader
    from filtertube.settings import get_settings

    ConfigLoader.reset()
    get_settings.cache_clear()
