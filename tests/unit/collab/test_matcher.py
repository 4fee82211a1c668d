"""Tests for the resolution matcher and its strategies."""

from __future__ import annotations

import pytest

from filtertube.collab.core.models import CandidateList, Collaborator
from filtertube.collab.data import PendingRequestRegistry
from filtertube.collab.resolution import (
    CorroborationStrategy,
    MatchOutcome,
    MatchStrategy,
    ResolutionMatcher,
    TriggerAffinityStrategy,
)
from filtertube.collab.triggers import TriggerTracker

SAM = Collaborator(name="Sam")
ALICE = Collaborator(name="Alice", handle="@alice")
BOB = Collaborator(name="Bob", handle="@bob")


@pytest.fixture
def registry(clock):
    return PendingRequestRegistry(default_ttl=30.0, clock=clock)


@pytest.fixture
def triggers(clock):
    return TriggerTracker(ttl=5.0, clock=clock)


@pytest.fixture
def matcher(registry, triggers):
    return ResolutionMatcher([TriggerAffinityStrategy(registry, triggers), CorroborationStrategy(registry)])


class TestTriggerPrecedence:
    def test_live_trigger_wins_over_fuzzy_match(self, matcher, registry, triggers):
        """Detail matching both A and B goes to the triggered request A."""
        registry.register("A", [ALICE], expected_count=2)
        registry.register("B", [ALICE], expected_count=5)
        triggers.record_trigger("A")

        outcome = matcher.match_with_outcome([ALICE, BOB])
        assert outcome.request.key == "A"
        assert outcome.method == "trigger"

    def test_trigger_match_skips_identity_comparison(self, matcher, registry, triggers):
        registry.register("A", [SAM])
        triggers.record_trigger("A")
        assert matcher.match([ALICE]).key == "A"

    def test_expired_trigger_falls_back_to_corroboration(self, matcher, registry, triggers, clock):
        registry.register("A", [SAM], expected_count=2)
        registry.register("B", [ALICE], expected_count=2)
        triggers.record_trigger("A")
        clock.advance(6)
        assert matcher.match([ALICE, BOB]).key == "B"

    def test_trigger_for_missing_request_falls_back(self, matcher, registry, triggers):
        registry.register("B", [ALICE], expected_count=2)
        triggers.record_trigger("gone")
        assert matcher.match([ALICE, BOB]).key == "B"


class TestCorroboration:
    def test_single_collaborator_detail_is_rejected(self, matcher, registry):
        registry.register("A", [ALICE])
        outcome = matcher.match_with_outcome([ALICE])
        assert outcome.request is None
        assert outcome.metadata["reason"] == "too_few_collaborators"

    def test_no_candidates(self, matcher, registry):
        registry.register("A", [SAM])
        outcome = matcher.match_with_outcome([ALICE, BOB])
        assert outcome.request is None
        assert outcome.metadata["reason"] == "no_candidates"

    def test_matches_on_primary_entry_only(self, matcher, registry):
        registry.register("A", [BOB])
        assert matcher.match([ALICE, BOB]) is None

    def test_case_insensitive_name_match(self, matcher, registry):
        registry.register("A", [Collaborator(name="ALICE")])
        assert matcher.match([ALICE, BOB]).key == "A"

    def test_larger_expected_count_wins(self, matcher, registry):
        """Two cards both showing Sam: the one expecting 3 collaborators wins."""
        registry.register("card2", [SAM], expected_count=2)
        registry.register("card3", [SAM], expected_count=3)
        outcome = matcher.match_with_outcome([SAM, ALICE, BOB])
        assert outcome.request.key == "card3"
        assert outcome.is_ambiguous

        registry.register("card4", [SAM], expected_count=3)
        registry.register("card5", [SAM], expected_count=2)
        assert matcher.match([SAM, ALICE, BOB]).key == "card4"

    def test_richer_partial_wins_on_equal_count(self, matcher, registry, clock):
        registry.register("rich", [Collaborator(name="Sam", handle="@sam")], expected_count=2)
        clock.advance(1)
        registry.register("bare", [SAM], expected_count=2)
        assert matcher.match([SAM, ALICE]).key == "rich"

    def test_most_recent_wins_on_full_tie(self, matcher, registry, clock):
        """Equal expected count and equal quality: the newer request wins."""
        registry.register("older", [SAM], expected_count=2)
        clock.advance(1)
        registry.register("newer", [SAM], expected_count=2)
        assert matcher.match([SAM, ALICE]).key == "newer"

    def test_later_registration_wins_same_timestamp(self, matcher, registry):
        registry.register("first", [SAM], expected_count=2)
        registry.register("second", [SAM], expected_count=2)
        assert matcher.match([SAM, ALICE]).key == "second"

    def test_expired_requests_are_not_candidates(self, matcher, registry, clock):
        registry.register("old", [SAM], expected_count=5)
        clock.advance(25)
        registry.register("fresh", [SAM], expected_count=2)
        clock.advance(10)
        assert matcher.match([SAM, ALICE]).key == "fresh"

    def test_custom_minimum(self, registry):
        strategy = CorroborationStrategy(registry, min_collaborators=3)
        registry.register("A", [SAM])
        assert strategy.match((SAM, ALICE)).metadata["reason"] == "too_few_collaborators"
        assert strategy.match((SAM, ALICE, BOB)).request.key == "A"

    def test_channel_map_corroborates_id_against_handle(self, registry):
        opaque = "UCaaaaaaaaaaaaaaaaaaaaaa"
        channel_map: dict[str, str] = {}
        strategy = CorroborationStrategy(registry, channel_map=channel_map)
        registry.register("A", [Collaborator(handle="@sam")], expected_count=2)
        detailed = (Collaborator(name="Samuel", id=opaque), ALICE)
        assert strategy.match(detailed).request is None

        channel_map[opaque.lower()] = "@sam"
        assert strategy.match(detailed).request.key == "A"


class TestMatcherPipeline:
    def test_empty_detail(self, matcher):
        outcome = matcher.match_with_outcome([])
        assert outcome.request is None
        assert outcome.metadata["reason"] == "empty_detail"

    def test_no_strategies(self):
        assert ResolutionMatcher().match_with_outcome([ALICE]).metadata["reason"] == "no_strategy_matched"

    def test_add_strategy_runs_in_order(self, registry):
        class Recorder(MatchStrategy):
            def __init__(self, label: str, calls: list[str]):
                self.label = label
                self.calls = calls

            @property
            def name(self) -> str:
                return self.label

            def match(self, detailed: CandidateList) -> MatchOutcome:
                self.calls.append(self.label)
                return MatchOutcome(method=self.label)

        calls: list[str] = []
        matcher = ResolutionMatcher()
        matcher.add_strategy(Recorder("first", calls))
        matcher.add_strategy(Recorder("second", calls))
        matcher.match([ALICE])
        assert calls == ["first", "second"]

    def test_none_entries_are_dropped(self, matcher, registry):
        registry.register("A", [ALICE], expected_count=2)
        assert matcher.match([None, ALICE, None, BOB]).key == "A"
