"""Tests for the keyword rule engine."""

import pytest

from facility_router.domain.policies.rule_engine import classify_text, keyword_points
from facility_router.domain.value_objects.enums import Confidence, SkillGroup


@pytest.mark.parametrize(
    "keyword, points",
    [("leak", 1), ("water leak", 4), ("lift not working", 6)],
)
def test_keyword_points(keyword, points):
    assert keyword_points(keyword) == points


def test_single_keyword_gives_high_confidence(dictionary):
    result = classify_text("The drain is blocked here", dictionary)
    assert result.skill_group == SkillGroup.PLUMBING
    assert result.issue_code == "drainage_blockage"
    assert result.confidence == Confidence.HIGH
    assert result.matched
    assert result.matched_keywords == ("drain",)


def test_no_keyword_falls_back(dictionary):
    result = classify_text("random unrelated note", dictionary)
    assert result.skill_group == SkillGroup.TECHNICAL
    assert result.issue_code is None
    assert result.confidence == Confidence.LOW
    assert not result.matched
    assert result.margin == 0.0


@pytest.mark.parametrize(
    "text",
    ["water leak near the lift", "lift is dripping, water leak below"],
)
def test_cross_group_match_uses_precedence(text, dictionary):
    # plumbing scores higher (leak + water leak) but vendor comes first
    result = classify_text(text, dictionary)
    assert result.skill_group == SkillGroup.VENDOR
    assert result.issue_code == "lift_breakdown"
    assert result.scores.group_score(SkillGroup.PLUMBING) == 5
    assert result.scores.group_score(SkillGroup.VENDOR) == 1


def test_matching_is_case_insensitive(dictionary):
    assert classify_text("LEAK in pantry", dictionary).issue_code == "water_leakage"


def test_multi_word_keyword_scores_more(dictionary):
    result = classify_text("AC not cooling, urgent", dictionary)
    assert result.scores.group_score(SkillGroup.TECHNICAL) == 5
    assert result.issue_code == "ac_breakdown"


def test_longest_keyword_breaks_match_count_tie(dictionary):
    # ac_breakdown and power_outage each match one keyword; "no power" is longer
    result = classify_text("no power in the room, ac off", dictionary)
    assert result.skill_group == SkillGroup.TECHNICAL
    assert result.issue_code == "power_outage"


def test_more_matches_beat_longer_keyword(dictionary):
    result = classify_text("ac not cooling and power cut", dictionary)
    assert result.issue_code == "ac_breakdown"


def test_location_does_not_change_result(dictionary):
    plain = classify_text("Leak reported", dictionary)
    located = classify_text("Leak reported at 5th floor west wing", dictionary)
    assert (plain.skill_group, plain.issue_code) == (located.skill_group, located.issue_code)


@pytest.mark.parametrize("text", [None, "", "   ", 42])
def test_non_text_input_is_total(dictionary, text):
    result = classify_text(text, dictionary)
    assert result.issue_code is None
    assert result.confidence == Confidence.LOW


def test_margin_between_groups(dictionary):
    # plumbing 5, vendor 1 → (5 - 1) / 5
    result = classify_text("water leak near the lift", dictionary)
    assert result.margin == pytest.approx(0.8)


def test_score_table_as_dict(dictionary):
    flat = classify_text("water leak near the lift", dictionary).scores.as_dict()
    assert flat["plumbing"] == 5
    assert flat["water_leakage"] == 5
    assert flat["vendor"] == 1
    assert flat["soft_service"] == 0


def test_default_dictionary_ac_example():
    result = classify_text("AC not cooling, urgent")
    assert result.skill_group == SkillGroup.TECHNICAL
    assert result.issue_code == "ac_breakdown"
    assert result.confidence == Confidence.HIGH


def test_default_dictionary_unrelated_example():
    result = classify_text("random unrelated note")
    assert result.skill_group == SkillGroup.TECHNICAL
    assert result.issue_code is None
    assert result.confidence == Confidence.LOW
