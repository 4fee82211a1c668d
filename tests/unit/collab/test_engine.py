"""Tests for the collaborator resolution engine facade."""

from __future__ import annotations

from unittest.mock import Mock, patch

import pytest

from filtertube.collab import CollaboratorResolutionEngine, EngineConfig, ResolutionResult
from filtertube.collab.core.models import Collaborator
from filtertube.config import ConfigError, ConfigLoader

ALICE = Collaborator(name="Alice", handle="@alice")
BOB = Collaborator(name="Bob", handle="@bob")
SAM = Collaborator(name="Sam")


class TestEndToEnd:
    def test_partial_trigger_detail_resolves_card(self, engine):
        """Partial card, user trigger, then the dialog's full list."""
        received: list[ResolutionResult] = []
        engine.on_resolved(received.append)

        engine.observe_partial("card1", [Collaborator(name="Alice")], expected_count=2)
        assert engine.record_trigger("card1")
        result = engine.observe_detailed([ALICE, BOB])

        assert received == [result]
        assert result.subject_id == "card1"
        assert result.collaborators == (ALICE, BOB)
        assert result.expected_count == 2
        assert engine.registry.get("card1") is None
        assert engine.triggers.current_trigger() is None
        assert engine.get_resolved("card1") == (ALICE, BOB)

    def test_ambiguous_detail_goes_to_larger_expected_count(self, engine):
        engine.observe_partial("card2", [SAM], expected_count=2)
        engine.observe_partial("card3", [SAM], expected_count=3)

        result = engine.observe_detailed([SAM, ALICE, BOB])

        assert result.entry_keys == ("card3",)
        assert engine.registry.get("card2") is not None

    def test_subject_siblings_resolve_together(self, engine):
        engine.observe_partial("grid-card", [SAM], expected_count=2, subject_id="vid1")
        engine.observe_partial("sidebar-card", [SAM], expected_count=2, subject_id="vid1")
        engine.record_trigger("grid-card")

        result = engine.observe_detailed([SAM, ALICE])

        assert result.subject_id == "vid1"
        assert result.entry_keys == ("grid-card", "sidebar-card")
        assert len(engine.registry) == 0

    def test_downgrade_is_not_emitted(self, engine):
        handler = Mock()
        engine.on_resolved(handler)
        engine.observe_partial("card1", [SAM], subject_id="vid1")
        engine.record_trigger("card1")
        engine.observe_detailed([SAM, ALICE, BOB])

        engine.observe_partial("card1", [SAM], subject_id="vid1")
        engine.record_trigger("card1")
        assert engine.observe_detailed([SAM]) is None

        assert handler.call_count == 1
        assert len(engine.get_resolved("vid1")) == 3

    def test_unmatched_detail_is_discarded(self, engine):
        engine.observe_partial("card1", [SAM], expected_count=2)
        assert engine.observe_detailed([ALICE, BOB]) is None
        assert engine.get_stats()["engine"]["unmatched_details"] == 1
        assert engine.registry.get("card1") is not None

    def test_expired_request_is_not_resolved(self, engine, clock):
        engine.observe_partial("card1", [SAM], expected_count=2)
        clock.advance(engine.config.pending_ttl_seconds + 1)
        assert engine.observe_detailed([SAM, ALICE]) is None

    def test_raw_extracted_identities(self, engine, make_collaborator):
        """Collaborators built from scraped strings resolve with canonical fields."""
        partial = make_collaborator(name="Alice", handle="https://www.youtube.com/@Alice/videos")
        engine.observe_partial("card1", [partial], expected_count=2, subject_id="vid9")

        detailed = [
            make_collaborator(name="Alice", handle="@ALICE", id="UCabcdefghijklmnopqrstuv"),
            make_collaborator(name="Bob", handle="UCbbbbbbbbbbbbbbbbbbbbbb"),
        ]
        result = engine.observe_detailed(detailed)

        assert result.handles == ["@alice"]
        assert result.channel_ids == ["ucabcdefghijklmnopqrstuv", "ucbbbbbbbbbbbbbbbbbbbbbb"]


class TestTriggers:
    def test_trigger_for_untracked_card_is_ignored(self, engine):
        assert not engine.record_trigger("unknown")
        assert engine.triggers.current_trigger() is None
        assert engine.get_stats()["engine"]["triggers_ignored"] == 1

    def test_cancel_clears_trigger(self, engine):
        engine.observe_partial("card1", [SAM], expected_count=2)
        engine.record_trigger("card1")
        engine.cancel("card1")
        assert engine.triggers.current_trigger() is None

    def test_trigger_not_consumed_when_nothing_resolves(self, engine):
        engine.observe_partial("card1", [SAM], expected_count=2)
        engine.record_trigger("card1")
        assert engine.observe_detailed([Collaborator(name=" ")]) is None
        assert engine.triggers.current_trigger() == "card1"


class TestDialogGuard:
    def test_matching_title_passes(self, engine):
        engine.observe_partial("card1", [SAM], expected_count=2)
        assert engine.observe_dialog("Collaborators", [SAM, ALICE]) is not None

    def test_unrelated_title_rejected(self, engine):
        engine.observe_partial("card1", [SAM], expected_count=2)
        assert engine.observe_dialog("Share", [SAM, ALICE]) is None
        assert engine.get_stats()["engine"]["dialogs_rejected"] == 1

    def test_missing_title_only_checks_length(self, engine):
        engine.observe_partial("card1", [SAM], expected_count=2)
        assert engine.observe_dialog(None, [SAM]) is None
        assert engine.observe_dialog(None, [SAM, ALICE]) is not None


class TestChannelMap:
    def test_channel_map_resolves_id_only_detail(self, clock):
        opaque = "UCcccccccccccccccccccccc"
        engine = CollaboratorResolutionEngine(clock=clock, channel_map={opaque.lower(): "@sam"})
        engine.observe_partial("card1", [Collaborator(handle="@sam")], expected_count=2)
        result = engine.observe_detailed([Collaborator(name="Sam Lee", id=opaque), ALICE])
        assert result is not None
        assert result.entry_keys == ("card1",)


class TestRobustness:
    def test_malformed_input_never_raises(self, engine):
        assert engine.observe_partial("", None) is None
        assert engine.observe_detailed(None) is None
        assert engine.observe_detailed([None, "junk"]) is None  # type: ignore[list-item]
        assert not engine.record_trigger("")
        assert not engine.cancel("missing")

    def test_malformed_trigger_dialog_and_cancel_never_raise(self, engine):
        engine.observe_partial("card1", [SAM], expected_count=2)
        assert engine.observe_dialog(123, [SAM, ALICE]) is None  # type: ignore[arg-type]
        assert engine.observe_dialog("Collaborators", 5) is None  # type: ignore[arg-type]
        assert not engine.record_trigger(["card1"])  # type: ignore[arg-type]
        assert not engine.cancel({"k": 1})  # type: ignore[arg-type]
        assert engine.get_stats()["engine"]["errors"] >= 3
        assert engine.registry.get("card1") is not None

    def test_trigger_error_is_logged_not_raised(self, engine, caplog):
        engine.observe_partial("card1", [SAM], expected_count=2)
        with patch.object(engine.triggers, "record_trigger", side_effect=RuntimeError("boom")):
            assert not engine.record_trigger("card1")
        assert engine.get_stats()["engine"]["errors"] == 1
        assert "Failed to record trigger" in caplog.text

    def test_internal_error_is_logged_not_raised(self, engine, caplog):
        with patch.object(engine.registry, "register", side_effect=RuntimeError("boom")):
            assert engine.observe_partial("card1", [SAM]) is None
        assert engine.get_stats()["engine"]["errors"] == 1
        assert "Failed to observe partial" in caplog.text

    def test_failing_subscriber_does_not_undo_resolution(self, engine):
        engine.on_resolved(Mock(side_effect=ValueError("consumer bug")))
        engine.observe_partial("card1", [SAM], expected_count=2)
        result = engine.observe_detailed([SAM, ALICE])
        assert result is not None
        assert engine.get_resolved("card1") == result.collaborators

    def test_unsubscribe(self, engine):
        handler = Mock()
        unsubscribe = engine.on_resolved(handler)
        unsubscribe()
        engine.observe_partial("card1", [SAM], expected_count=2)
        engine.observe_detailed([SAM, ALICE])
        handler.assert_not_called()


class TestCancelAndStats:
    def test_cancel(self, engine):
        engine.observe_partial("card1", [SAM], expected_count=2)
        assert engine.cancel("card1")
        assert engine.observe_detailed([SAM, ALICE]) is None
        assert engine.get_stats()["engine"]["cancelled"] == 1

    def test_stats_shape(self, engine):
        stats = engine.get_stats()
        assert set(stats) == {"engine", "registry", "resolved_cache", "entries", "propagator", "events"}


class TestFromConfig:
    def test_uses_loader_values(self, mock_config):
        mock_config.values["collab.trigger.ttl_seconds"] = 2.5
        engine = CollaboratorResolutionEngine.from_config()
        assert engine.config.trigger_ttl_seconds == 2.5
        assert engine.triggers.ttl == 2.5

    def test_overrides_flow_through(self):
        loader = ConfigLoader(overrides={"collab.pending.max_size": 10})
        engine = CollaboratorResolutionEngine.from_config(loader)
        assert engine.registry.max_size == 10

    def test_invalid_config_fails_fast(self):
        loader = ConfigLoader(overrides={"collab.detail.min_collaborators": 0})
        with pytest.raises(ConfigError):
            CollaboratorResolutionEngine.from_config(loader)

    def test_default_config(self):
        assert EngineConfig().title_regex.search("COLLABORATORS")
