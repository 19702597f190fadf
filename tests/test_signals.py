"""Tests for the signal inference engine."""

from __future__ import annotations

from datetime import datetime, timezone

from ary.extraction.signals import infer, infer_messages, sequential_ids
from ary.extraction.word_lists import BRANCH_KEYWORDS
from ary.models.records import CompetenceBranch, DerivedSignal


class TestInfer:
    """Branch detection, confidence and trait phrases."""

    def test_cognitive_signal_from_problem_solving(self):
        signals = infer("I love to analyze and solve complex problems")
        cognitive = [s for s in signals if s.branch == CompetenceBranch.COGNITIVE]
        assert len(cognitive) == 1
        assert cognitive[0].confidence > 0

    def test_confidence_is_share_of_vocabulary(self):
        [signal] = infer("I love to analyze and solve complex problems")
        vocabulary = BRANCH_KEYWORDS[CompetenceBranch.COGNITIVE]
        assert signal.confidence == 2 / len(vocabulary)

    def test_trait_follows_vocabulary_order(self):
        [signal] = infer("I solve things, then analyze them")
        assert signal.trait == "analyzes complex information"

    def test_fallback_trait(self):
        [signal] = infer("We made a strategy")
        assert signal.branch == CompetenceBranch.COGNITIVE
        assert signal.trait == "demonstrates cognitive competence"

    def test_one_signal_per_branch_in_enum_order(self):
        signals = infer("I help my team deliver results")
        assert [s.branch for s in signals] == [
            CompetenceBranch.INTERPERSONAL,
            CompetenceBranch.EXECUTION,
        ]
        assert signals[0].trait == "supports others effectively"
        assert signals[1].trait == "delivers on commitments"

    def test_shared_keyword_feeds_both_branches(self):
        signals = infer("I understand")
        assert {s.branch for s in signals} == {
            CompetenceBranch.COGNITIVE,
            CompetenceBranch.INTERPERSONAL,
        }

    def test_no_match_no_signal(self):
        assert infer("The weather was nice") == []

    def test_empty_text(self):
        assert infer("") == []
        assert infer(None) == []

    def test_confidence_stays_in_range(self):
        text = " ".join(BRANCH_KEYWORDS[CompetenceBranch.EXECUTION])
        [signal] = [s for s in infer(text) if s.branch == CompetenceBranch.EXECUTION]
        assert signal.confidence == 1.0


class TestInjectedSources:
    """Ids and timestamps are deterministic when injected."""

    def test_sequential_ids(self, fixed_clock):
        signals = infer(
            "I help my team deliver results",
            id_source=sequential_ids("sig"),
            clock=fixed_clock,
        )
        assert [s.id for s in signals] == ["sig-1", "sig-2"]
        assert all(s.timestamp == fixed_clock() for s in signals)

    def test_fresh_counter_per_call(self):
        first = infer("I help", id_source=sequential_ids("a"))
        second = infer("I help", id_source=sequential_ids("a"))
        assert first[0].id == second[0].id == "a-1"

    def test_default_timestamp_is_timezone_aware(self):
        [signal] = infer("I like to plan")
        assert signal.timestamp.tzinfo is not None


class TestDerivedSignal:
    def test_confidence_clamped(self):
        now = datetime.now(timezone.utc)
        high = DerivedSignal("x", CompetenceBranch.MOTIVATION, "t", 1.7, now)
        low = DerivedSignal("y", CompetenceBranch.MOTIVATION, "t", -0.5, now)
        assert high.confidence == 1.0
        assert low.confidence == 0.0

    def test_to_dict_can_drop_confidence(self, fixed_clock):
        [signal] = infer("I feel motivated", clock=fixed_clock)
        data = signal.to_dict(include_confidence=False)
        assert "confidence" not in data
        assert data["branch"] == "motivation"
        assert data["trait"] == "self-motivated"
        assert data["timestamp"] == fixed_clock().isoformat()


class TestInferMessages:
    """Only user messages contribute."""

    def test_ignores_assistant_messages(self):
        signals = infer_messages([
            {"role": "assistant", "content": "Do you analyze things?"},
            {"role": "user", "content": "I like to help people"},
        ])
        assert [s.branch for s in signals] == [CompetenceBranch.INTERPERSONAL]

    def test_missing_role_counts_as_user(self):
        signals = infer_messages([{"content": "I plan ahead"}])
        assert [s.branch for s in signals] == [CompetenceBranch.COGNITIVE]
