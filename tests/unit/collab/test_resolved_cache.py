"""Tests for the resolved collaborator cache."""

from __future__ import annotations

import pytest

from filtertube.collab.core.models import Collaborator
from filtertube.collab.data import ResolvedCache

THREE = (
    Collaborator(name="Alice", handle="@alice"),
    Collaborator(name="Bob", handle="@bob"),
    Collaborator(name="Carol", handle="@carol"),
)
ONE = (Collaborator(name="Alice", handle="@alice"),)


@pytest.fixture
def cache(clock):
    return ResolvedCache(max_size=2, clock=clock)


class TestAntiDowngrade:
    def test_poorer_list_never_replaces_richer(self, cache):
        """Resolving S with 3 entries then 1 entry keeps the 3-entry list."""
        assert cache.put("S", THREE, 3)
        assert not cache.put("S", ONE, 1)
        assert cache.get("S") == THREE
        assert cache.get_stats()["downgrades_rejected"] == 1

    def test_equal_score_replaces(self, cache):
        other = (
            Collaborator(name="Dan", handle="@dan"),
            Collaborator(name="Eve", handle="@eve"),
            Collaborator(name="Fay", handle="@fay"),
        )
        cache.put("S", THREE)
        assert cache.put("S", other)
        assert cache.get("S") == other

    def test_richer_list_replaces(self, cache):
        cache.put("S", ONE)
        assert cache.put("S", THREE)
        assert cache.score_of("S") == cache.scorer.score(THREE)

    def test_expected_count_never_shrinks(self, cache):
        cache.put("S", THREE, 4)
        cache.put("S", THREE, 3)
        assert cache.get_entry("S").expected_count == 4

    def test_would_downgrade(self, cache):
        assert not cache.would_downgrade("S", ONE)
        cache.put("S", THREE)
        assert cache.would_downgrade("S", ONE)


class TestCacheBasics:
    def test_missing_subject(self, cache):
        assert cache.get("nope") is None
        assert cache.get(None) is None
        assert cache.score_of("nope") == 0

    def test_empty_values_not_stored(self, cache):
        assert not cache.put("", THREE)
        assert not cache.put("S", ())
        assert len(cache) == 0

    def test_lru_eviction(self, cache):
        cache.put("a", ONE)
        cache.put("b", ONE)
        cache.get("a")
        cache.put("c", ONE)
        assert "a" in cache
        assert "b" not in cache
        assert cache.get_stats()["evictions"] == 1

    def test_updated_at_uses_clock(self, cache, clock):
        clock.advance(7)
        cache.put("S", ONE)
        assert cache.get_entry("S").updated_at == clock.now

    def test_hit_rate(self, cache):
        cache.put("S", ONE)
        cache.get("S")
        cache.get("missing")
        assert cache.get_stats()["hit_rate"] == 0.5
