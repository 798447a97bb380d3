"""Tests for the confidence analyzer."""

import pytest

from facility_router.domain.policies.confidence import (
    ConfidenceThresholds,
    analyze_confidence,
    shannon_entropy,
    top_candidates,
)
from facility_router.domain.policies.rule_engine import classify_text
from facility_router.domain.value_objects.enums import SkillGroup, Zone


def _analyze(text, dictionary, thresholds=None):
    return analyze_confidence(classify_text(text, dictionary), text, thresholds)


def test_shannon_entropy():
    assert shannon_entropy([]) == 0.0
    assert shannon_entropy([0, 0]) == 0.0
    assert shannon_entropy([4, 0, 0]) == 0.0
    assert shannon_entropy([1, 1]) == pytest.approx(1.0)
    assert shannon_entropy([1, 1, 1, 1]) == pytest.approx(2.0)


def test_clear_match_is_zone_a(dictionary):
    analysis = _analyze("The drain is blocked again", dictionary)
    assert analysis.zone == Zone.A_CONFIDENT
    assert not analysis.needs_escalation
    assert analysis.entropy == 0.0


def test_no_match_is_zone_c(dictionary):
    analysis = _analyze("random unrelated note", dictionary)
    assert analysis.zone == Zone.C_ANOMALOUS
    assert analysis.needs_escalation
    assert "No dictionary keyword" in analysis.reason


def test_sparse_text_is_zone_c(dictionary):
    analysis = _analyze("leak", dictionary)
    assert analysis.zone == Zone.C_ANOMALOUS
    assert "sparse" in analysis.reason


def test_sparse_thresholds_are_configurable(dictionary):
    thresholds = ConfidenceThresholds(min_text_length=1, min_word_count=1)
    assert _analyze("leak", dictionary, thresholds).zone == Zone.A_CONFIDENT


def test_precedence_over_higher_score_is_zone_b(dictionary):
    analysis = _analyze("water leak near the lift", dictionary)
    assert analysis.zone == Zone.B_AMBIGUOUS
    assert "Precedence chose vendor" in analysis.reason


def test_tied_groups_are_zone_b(dictionary):
    analysis = _analyze("leak and dirty floor", dictionary)
    assert analysis.zone == Zone.B_AMBIGUOUS
    assert "Low margin" in analysis.reason
    assert analysis.normalized_entropy == pytest.approx(0.5)


def test_entropy_threshold_triggers_zone_b(dictionary):
    # plumbing 5 vs soft_service 1: margin 0.8 passes, entropy ~0.33 of max
    thresholds = ConfidenceThresholds(entropy_threshold=0.2)
    analysis = _analyze("water leak, dirty floor", dictionary, thresholds)
    assert analysis.zone == Zone.B_AMBIGUOUS
    assert "entropy" in analysis.reason


def test_top_candidates_ranked_by_score(dictionary):
    rule = classify_text("water leak near the lift", dictionary)
    candidates = top_candidates(rule, n=3)
    assert [c.skill_group for c in candidates] == [SkillGroup.PLUMBING, SkillGroup.VENDOR]
    assert candidates[0].issue_code == "water_leakage"
    assert candidates[0].score == 5


def test_top_candidates_respects_n(dictionary):
    rule = classify_text("water leak near the lift", dictionary)
    assert len(top_candidates(rule, n=1)) == 1


def test_top_candidates_empty_without_match(dictionary):
    assert top_candidates(classify_text("random unrelated note", dictionary)) == []
