"""RuleEngine — deterministic keyword classification of ticket text."""

from __future__ import annotations

from facility_router.domain.entities.classification import RuleClassification
from facility_router.domain.value_objects.enums import Confidence
from facility_router.domain.value_objects.issue_dictionary import (
    IssueDictionary,
    default_dictionary,
)
from facility_router.domain.value_objects.score_table import IssueScore, ScoreTable

MULTI_WORD_BONUS = 2


def keyword_points(keyword: str) -> int:
    """1 point for a single word, ``word_count × 2`` for a phrase."""
    word_count = len(keyword.split())
    return word_count * MULTI_WORD_BONUS if word_count > 1 else 1


def classify_text(text: str | None, dictionary: IssueDictionary | None = None) -> RuleClassification:
    """Pure function: score every issue code and pick a winner.

    Rules:
      1. Lowercase the text; a keyword matches on substring containment.
      2. Score per issue code (see ``keyword_points``).
      3. Walk skill groups in precedence order (vendor > technical >
         plumbing > soft_service); the first group with any match wins.
      4. Inside that group, most matched keywords wins, then the longest
         matched keyword.
      5. No match anywhere → dictionary fallback group, no issue code,
         low confidence.

    Location words are not in the dictionary, so they never affect the result.
    """
    dictionary = dictionary or default_dictionary()
    lowered = text.lower() if isinstance(text, str) else ""

    issues: list[IssueScore] = []
    matched_keywords: list[str] = []
    order = 0
    for group, issue_map in dictionary.groups.items():
        for issue_code, keywords in issue_map.items():
            score = 0
            match_count = 0
            longest = 0
            for keyword in keywords:
                if keyword in lowered:
                    score += keyword_points(keyword)
                    match_count += 1
                    longest = max(longest, len(keyword))
                    matched_keywords.append(keyword)
            if match_count:
                issues.append(
                    IssueScore(
                        skill_group=group,
                        issue_code=issue_code,
                        score=score,
                        match_count=match_count,
                        longest_keyword=longest,
                        order=order,
                    )
                )
            order += 1

    table = ScoreTable(skill_groups=dictionary.precedence_order, issues=tuple(issues))
    margin = _margin(table)

    for group in dictionary.precedence_order:
        best = table.best_issue(group)
        if best is not None:
            return RuleClassification(
                issue_code=best.issue_code,
                skill_group=group,
                confidence=Confidence.HIGH,
                scores=table,
                margin=margin,
                matched_keywords=tuple(matched_keywords),
            )

    return RuleClassification(
        issue_code=None,
        skill_group=dictionary.fallback.skill_group,
        confidence=dictionary.fallback.confidence,
        scores=table,
        margin=0.0,
    )


def _margin(table: ScoreTable) -> float:
    ranked = table.ranked_groups()
    if not ranked:
        return 0.0
    top = ranked[0][1]
    second = ranked[1][1] if len(ranked) > 1 else 0
    return (top - second) / top
