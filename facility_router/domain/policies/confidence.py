"""ConfidenceAnalyzer — decide whether the rule result can be trusted as-is."""

from __future__ import annotations

import math
from dataclasses import dataclass

from facility_router.domain.entities.classification import (
    ConfidenceAnalysis,
    RuleClassification,
)
from facility_router.domain.value_objects.enums import SkillGroup, Zone


@dataclass(frozen=True)
class ConfidenceThresholds:
    """Tunable zone boundaries (see Settings.confidence_*)."""

    margin_threshold: float = 0.5
    entropy_threshold: float = 0.6
    min_text_length: int = 8
    min_word_count: int = 2


@dataclass(frozen=True)
class Candidate:
    skill_group: SkillGroup
    issue_code: str
    score: int


def shannon_entropy(scores: list[int]) -> float:
    """Entropy in bits of the normalized distribution; 0.0 for an empty one."""
    total = sum(scores)
    if total <= 0:
        return 0.0
    entropy = 0.0
    for s in scores:
        if s > 0:
            p = s / total
            entropy -= p * math.log2(p)
    return entropy


def analyze_confidence(
    rule: RuleClassification,
    text: str | None,
    thresholds: ConfidenceThresholds | None = None,
) -> ConfidenceAnalysis:
    """Pure function: classify the rule output into zone A, B or C.

    Zone C (anomalous, escalation required):
      - nothing matched, or
      - the text is too short / has too few words to trust keyword rules.
    Zone B (ambiguous, escalation recommended):
      - margin between the two best groups is below the threshold, or
      - normalized entropy across all groups is above the threshold, or
      - precedence picked a group that is not the highest-scoring one.
    Zone A (confident): everything else.
    """
    thresholds = thresholds or ConfidenceThresholds()
    stripped = (text or "").strip() if isinstance(text, str) else ""

    group_scores = rule.scores.group_scores()
    entropy = shannon_entropy(list(group_scores.values()))
    candidates = max(len(group_scores), 2)
    normalized = entropy / math.log2(candidates)

    def verdict(zone: Zone, reason: str) -> ConfidenceAnalysis:
        return ConfidenceAnalysis(
            zone=zone,
            entropy=round(entropy, 4),
            normalized_entropy=round(normalized, 4),
            needs_escalation=zone != Zone.A_CONFIDENT,
            reason=reason,
        )

    if not rule.matched:
        return verdict(Zone.C_ANOMALOUS, "No dictionary keyword matched")

    if len(stripped) < thresholds.min_text_length or len(stripped.split()) < thresholds.min_word_count:
        return verdict(
            Zone.C_ANOMALOUS,
            f"Text too sparse for rules ({len(stripped)} chars, {len(stripped.split())} words)",
        )

    top_group, top_score = rule.scores.ranked_groups()[0]
    if group_scores.get(rule.skill_group, 0) < top_score:
        return verdict(
            Zone.B_AMBIGUOUS,
            f"Precedence chose {rule.skill_group.value} over higher-scoring {top_group.value}",
        )

    if rule.margin < thresholds.margin_threshold:
        return verdict(
            Zone.B_AMBIGUOUS,
            f"Low margin between top candidates ({rule.margin:.2f} < {thresholds.margin_threshold:.2f})",
        )

    if normalized > thresholds.entropy_threshold:
        return verdict(
            Zone.B_AMBIGUOUS,
            f"Scores spread across groups (entropy {normalized:.2f} > {thresholds.entropy_threshold:.2f})",
        )

    return verdict(Zone.A_CONFIDENT, f"Clear rule match: {rule.issue_code} ({rule.skill_group.value})")


def top_candidates(rule: RuleClassification, n: int = 3) -> list[Candidate]:
    """Best issue code of each matched group, strongest group first."""
    result: list[Candidate] = []
    for group, score in rule.scores.ranked_groups()[:n]:
        best = rule.scores.best_issue(group)
        if best is not None:
            result.append(Candidate(skill_group=group, issue_code=best.issue_code, score=score))
    return result
