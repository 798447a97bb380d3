"""Tests for IssueDictionary loading and validation."""

import copy

import pytest

from facility_router.domain.value_objects.enums import Confidence, SkillGroup
from facility_router.domain.value_objects.issue_dictionary import (
    DictionaryError,
    IssueDictionary,
    default_dictionary,
    load_issue_dictionary,
)


def test_from_mapping_builds_groups(dictionary):
    assert dictionary.precedence_order == (
        SkillGroup.VENDOR, SkillGroup.TECHNICAL, SkillGroup.PLUMBING, SkillGroup.SOFT_SERVICE,
    )
    assert dictionary.issue_codes(SkillGroup.PLUMBING) == ("water_leakage", "drainage_blockage")
    assert dictionary.fallback.skill_group == SkillGroup.TECHNICAL
    assert dictionary.fallback.confidence == Confidence.LOW


def test_dictionary_is_read_only(dictionary):
    with pytest.raises(TypeError):
        dictionary.groups[SkillGroup.VENDOR]["new_code"] = ("x",)


def test_unknown_skill_group_rejected(raw_dictionary):
    raw = copy.deepcopy(raw_dictionary)
    raw["skill_groups"]["security"] = {"intruder": ["intruder"]}
    with pytest.raises(DictionaryError):
        IssueDictionary.from_mapping(raw)


def test_duplicate_issue_code_rejected(raw_dictionary):
    raw = copy.deepcopy(raw_dictionary)
    raw["skill_groups"]["soft_service"]["water_leakage"] = ["puddle"]
    with pytest.raises(DictionaryError, match="Duplicate"):
        IssueDictionary.from_mapping(raw)


def test_uppercase_keyword_rejected(raw_dictionary):
    raw = copy.deepcopy(raw_dictionary)
    raw["skill_groups"]["vendor"]["lift_breakdown"] = ["Lift"]
    with pytest.raises(DictionaryError):
        IssueDictionary.from_mapping(raw)


def test_incomplete_precedence_rejected(raw_dictionary):
    raw = copy.deepcopy(raw_dictionary)
    raw["precedence_order"] = ["vendor", "technical", "plumbing"]
    with pytest.raises(DictionaryError, match="precedence_order"):
        IssueDictionary.from_mapping(raw)


def test_missing_section_rejected(raw_dictionary):
    raw = copy.deepcopy(raw_dictionary)
    del raw["defaults"]
    with pytest.raises(DictionaryError, match="Missing"):
        IssueDictionary.from_mapping(raw)


def test_packaged_dictionary_loads():
    d = load_issue_dictionary()
    assert set(d.skill_groups) == set(SkillGroup)
    assert "ac_breakdown" in d.issue_codes(SkillGroup.TECHNICAL)
    assert "lift_breakdown" in d.issue_codes(SkillGroup.VENDOR)


def test_load_from_path(tmp_path, raw_dictionary):
    import json

    path = tmp_path / "dict.json"
    path.write_text(json.dumps(raw_dictionary), encoding="utf-8")
    d = load_issue_dictionary(path)
    assert d.issue_codes(SkillGroup.VENDOR) == ("lift_breakdown",)


def test_default_dictionary_is_cached():
    assert default_dictionary() is default_dictionary()
