"""ResolveClassificationUseCase — rules → confidence → optional escalation → decision."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from facility_router.application.ports.decision_logger import DecisionEvent, DecisionLogger
from facility_router.application.ports.reasoning_gateway import (
    GatewayError,
    GatewayTimeoutError,
    ReasoningGateway,
    ReasoningRequest,
)
from facility_router.domain.entities.classification import (
    ConfidenceAnalysis,
    LLMJudgment,
    ResolvedClassification,
    RuleClassification,
)
from facility_router.domain.policies.confidence import (
    ConfidenceThresholds,
    analyze_confidence,
    top_candidates,
)
from facility_router.domain.policies.rule_engine import classify_text
from facility_router.domain.value_objects.enums import Confidence, DecisionSource
from facility_router.domain.value_objects.issue_dictionary import (
    IssueDictionary,
    default_dictionary,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EscalationPolicy:
    """Deployment switch: escalate every ticket regardless of rule confidence."""

    force_escalation: bool = False


class ResolveClassificationUseCase:
    """Orchestrates the hybrid classification of one ticket text."""

    def __init__(
        self,
        gateway: ReasoningGateway,
        decision_logger: DecisionLogger,
        dictionary: IssueDictionary | None = None,
        thresholds: ConfidenceThresholds | None = None,
        default_policy: EscalationPolicy | None = None,
        timeout_seconds: float = 8.0,
        top_n: int = 3,
    ):
        self._gateway = gateway
        self._log = decision_logger
        self._dictionary = dictionary or default_dictionary()
        self._thresholds = thresholds or ConfidenceThresholds()
        self._default_policy = default_policy or EscalationPolicy()
        self._timeout = timeout_seconds
        self._top_n = top_n

    async def execute(
        self,
        text: str,
        policy: EscalationPolicy | None = None,
        ticket_id: str | None = None,
    ) -> ResolvedClassification:
        """Resolve the skill group for *text*.

        Pipeline:
        1. Rule engine
        2. Confidence analyzer
        3. Reasoning gateway when forced by policy or the analyzer asks for it
        4. Gateway success → its primary group wins (source=llm)
        5. Gateway failure / not invoked → rule result stands (source=rule)

        Never raises on gateway problems; the worst case is the rule fallback.
        """
        policy = policy or self._default_policy
        rule = classify_text(text, self._dictionary)
        analysis = analyze_confidence(rule, text, self._thresholds)

        if analysis.needs_escalation:
            self._emit("rule.low_confidence", ticket_id, {
                "reason": analysis.reason,
                "zone": analysis.zone.value,
                "margin": rule.margin,
                "top_category": rule.skill_group.value,
            })

        resolution = self._from_rule(rule, analysis, escalation_used=False)
        if policy.force_escalation or analysis.needs_escalation:
            judgment = await self._escalate(text, rule, analysis, ticket_id)
            if judgment is None:
                resolution = self._from_rule(rule, analysis, escalation_used=True)
            else:
                resolution = self._from_judgment(rule, analysis, judgment)

        logger.info(
            "Classified ticket %s: group=%s issue=%s zone=%s source=%s",
            ticket_id or "-", resolution.skill_group.value, resolution.issue_code,
            resolution.zone.value, resolution.decision_source.value,
        )
        self._emit("classification.resolved", ticket_id, {
            "skill_group": resolution.skill_group.value,
            "issue_code": resolution.issue_code,
            "zone": resolution.zone.value,
            "decision_source": resolution.decision_source.value,
        })
        return resolution

    async def _escalate(
        self,
        text: str,
        rule: RuleClassification,
        analysis: ConfidenceAnalysis,
        ticket_id: str | None,
    ) -> LLMJudgment | None:
        candidates = [c.skill_group.value for c in top_candidates(rule, self._top_n)]
        if not candidates:
            candidates = [g.value for g in self._dictionary.skill_groups]
        request = ReasoningRequest(
            ticket_text=text or "",
            candidate_buckets=candidates,
            rule_scores=rule.scores.as_dict(),
        )

        try:
            try:
                judgment = await asyncio.wait_for(
                    self._gateway.classify(request), timeout=self._timeout
                )
            except asyncio.TimeoutError as e:
                raise GatewayTimeoutError(
                    f"Reasoning service did not answer within {self._timeout:.1f}s"
                ) from e
        except GatewayError as e:
            logger.warning("Escalation failed (%s), keeping rule result: %s", type(e).__name__, e)
            self._emit("llm.failed", ticket_id, {"error": type(e).__name__, "detail": str(e)})
            return None
        except Exception as e:
            logger.exception("Unexpected reasoning gateway error, keeping rule result")
            self._emit("llm.failed", ticket_id, {"error": type(e).__name__, "detail": str(e)})
            return None

        self._emit("llm.invoked", ticket_id, {
            "latency_ms": judgment.latency_ms,
            "reason": analysis.reason if analysis.needs_escalation else "Forced escalation policy",
            "primary_category": judgment.primary_skill_group.value,
        })
        return judgment

    @staticmethod
    def _from_rule(
        rule: RuleClassification,
        analysis: ConfidenceAnalysis,
        escalation_used: bool,
    ) -> ResolvedClassification:
        return ResolvedClassification(
            issue_code=rule.issue_code,
            skill_group=rule.skill_group,
            confidence=rule.confidence,
            zone=analysis.zone,
            decision_source=DecisionSource.RULE,
            escalation_used=escalation_used,
            escalation_accepted=False,
            rule_result=rule,
            confidence_analysis=analysis,
        )

    def _from_judgment(
        self,
        rule: RuleClassification,
        analysis: ConfidenceAnalysis,
        judgment: LLMJudgment,
    ) -> ResolvedClassification:
        # Best effort: reuse the rule engine's top issue code for the chosen group
        matched = next(
            (c for c in top_candidates(rule, self._top_n)
             if c.skill_group == judgment.primary_skill_group),
            None,
        )
        return ResolvedClassification(
            issue_code=matched.issue_code if matched else None,
            skill_group=judgment.primary_skill_group,
            confidence=Confidence.HIGH,
            zone=analysis.zone,
            decision_source=DecisionSource.LLM,
            escalation_used=True,
            escalation_accepted=True,
            rule_result=rule,
            confidence_analysis=analysis,
            secondary_skill_group=judgment.secondary_skill_group,
            risk_flag=judgment.risk_flag,
            rationale=judgment.rationale,
            priority=judgment.priority,
            escalation_result=judgment,
        )

    def _emit(self, name: str, ticket_id: str | None, payload: dict) -> None:
        try:
            self._log.submit(DecisionEvent(name=name, ticket_id=ticket_id, payload=payload))
        except Exception:
            logger.exception("Failed to submit decision event %s", name)
