"""IssueDictionary — immutable keyword map used by the rule engine."""

from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from importlib import resources
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

from facility_router.domain.value_objects.enums import Confidence, SkillGroup

PACKAGED_DICTIONARY = "issue_dictionary.json"


class DictionaryError(ValueError):
    """Raised when dictionary data is structurally invalid."""


@dataclass(frozen=True)
class Fallback:
    skill_group: SkillGroup
    confidence: Confidence


@dataclass(frozen=True)
class IssueDictionary:
    """skill_group → issue_code → keywords, plus precedence and fallback.

    Build instances with ``from_mapping`` so that the validation runs; the
    nested mappings are read-only views.
    """

    groups: Mapping[SkillGroup, Mapping[str, tuple[str, ...]]]
    precedence_order: tuple[SkillGroup, ...]
    fallback: Fallback

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> IssueDictionary:
        """Validate and freeze a raw mapping (the JSON document layout).

        Raises:
            DictionaryError: unknown skill group, duplicate issue code,
                empty or non-lowercase keyword, or a precedence order that
                does not name every group exactly once.
        """
        try:
            raw_groups = raw["skill_groups"]
            raw_precedence = raw["precedence_order"]
            defaults = raw["defaults"]
        except KeyError as e:
            raise DictionaryError(f"Missing dictionary section: {e}") from e

        groups: dict[SkillGroup, Mapping[str, tuple[str, ...]]] = {}
        seen_codes: set[str] = set()
        for group_name, issues in raw_groups.items():
            group = _parse_group(group_name)
            frozen_issues: dict[str, tuple[str, ...]] = {}
            for issue_code, keywords in issues.items():
                if issue_code in seen_codes:
                    raise DictionaryError(f"Duplicate issue code: {issue_code}")
                seen_codes.add(issue_code)
                for keyword in keywords:
                    if not keyword or keyword != keyword.strip().lower():
                        raise DictionaryError(
                            f"Keyword {keyword!r} in {issue_code} must be non-empty lowercase"
                        )
                frozen_issues[issue_code] = tuple(keywords)
            groups[group] = MappingProxyType(frozen_issues)

        precedence = tuple(_parse_group(g) for g in raw_precedence)
        if len(set(precedence)) != len(precedence) or set(precedence) != set(groups):
            raise DictionaryError("precedence_order must list every skill group exactly once")

        fallback_group = _parse_group(defaults.get("fallback_skill_group", ""))
        if fallback_group not in groups:
            raise DictionaryError(f"Fallback group {fallback_group.value} is not in the dictionary")
        try:
            fallback_confidence = Confidence(defaults.get("confidence_on_fallback", "low"))
        except ValueError as e:
            raise DictionaryError(str(e)) from e

        return cls(
            groups=MappingProxyType(groups),
            precedence_order=precedence,
            fallback=Fallback(skill_group=fallback_group, confidence=fallback_confidence),
        )

    @property
    def skill_groups(self) -> tuple[SkillGroup, ...]:
        return self.precedence_order

    def issue_codes(self, group: SkillGroup) -> tuple[str, ...]:
        return tuple(self.groups.get(group, {}))


def _parse_group(name: str) -> SkillGroup:
    try:
        return SkillGroup(name)
    except ValueError as e:
        raise DictionaryError(f"Unknown skill group: {name!r}") from e


def load_issue_dictionary(path: str | Path | None = None) -> IssueDictionary:
    """Load a dictionary from *path*, or the copy packaged with the domain."""
    if path is None:
        text = (
            resources.files("facility_router.domain")
            .joinpath("data")
            .joinpath(PACKAGED_DICTIONARY)
            .read_text(encoding="utf-8")
        )
    else:
        text = Path(path).read_text(encoding="utf-8")
    return IssueDictionary.from_mapping(json.loads(text))


@lru_cache(maxsize=1)
def default_dictionary() -> IssueDictionary:
    """The packaged dictionary, loaded once per process."""
    return load_issue_dictionary()
