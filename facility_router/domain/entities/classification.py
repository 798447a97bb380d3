"""Classification records — rule output, confidence verdict, final decision."""

from __future__ import annotations

from dataclasses import dataclass

from facility_router.domain.value_objects.enums import (
    Confidence,
    DecisionSource,
    Priority,
    SkillGroup,
    Zone,
)
from facility_router.domain.value_objects.score_table import ScoreTable


@dataclass(frozen=True)
class RuleClassification:
    issue_code: str | None
    skill_group: SkillGroup
    confidence: Confidence
    scores: ScoreTable
    margin: float  # (top - second) / top over skill-group scores; 0.0 when nothing matched
    matched_keywords: tuple[str, ...] = ()

    @property
    def matched(self) -> bool:
        return self.scores.total() > 0


@dataclass(frozen=True)
class ConfidenceAnalysis:
    zone: Zone
    entropy: float
    normalized_entropy: float
    needs_escalation: bool
    reason: str


@dataclass(frozen=True)
class TokenUsage:
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


@dataclass(frozen=True)
class LLMJudgment:
    """Validated answer from the reasoning service."""

    primary_skill_group: SkillGroup
    rationale: str
    latency_ms: int
    secondary_skill_group: SkillGroup | None = None
    priority: Priority | None = None
    risk_flag: str | None = None
    token_usage: TokenUsage | None = None


@dataclass(frozen=True)
class ResolvedClassification:
    """Final decision for one classification run. Never mutated after creation."""

    issue_code: str | None
    skill_group: SkillGroup
    confidence: Confidence
    zone: Zone
    decision_source: DecisionSource
    escalation_used: bool
    escalation_accepted: bool
    rule_result: RuleClassification
    confidence_analysis: ConfidenceAnalysis
    secondary_skill_group: SkillGroup | None = None
    risk_flag: str | None = None
    rationale: str | None = None
    priority: Priority | None = None
    escalation_result: LLMJudgment | None = None
