"""Tests for ResolveClassificationUseCase with a fake reasoning gateway."""

from __future__ import annotations

import asyncio

import pytest

from facility_router.application.ports.reasoning_gateway import (
    GatewayTransportError,
    ReasoningGateway,
    UnknownSkillGroupError,
)
from facility_router.application.use_cases.resolve_classification import (
    EscalationPolicy,
    ResolveClassificationUseCase,
)
from facility_router.domain.entities.classification import LLMJudgment
from facility_router.domain.value_objects.enums import (
    Confidence,
    DecisionSource,
    Priority,
    SkillGroup,
    Zone,
)

# ─── Fakes ───────────────────────────────────────────────────────────


class FakeGateway(ReasoningGateway):
    def __init__(self, judgment: LLMJudgment | None = None, error: Exception | None = None,
                 delay: float = 0.0):
        self._judgment = judgment
        self._error = error
        self._delay = delay
        self.requests = []

    async def classify(self, request):
        self.requests.append(request)
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._error is not None:
            raise self._error
        return self._judgment


def _judgment(group: SkillGroup = SkillGroup.PLUMBING, **kwargs) -> LLMJudgment:
    return LLMJudgment(
        primary_skill_group=group,
        rationale="Water is leaking from a pipe near the lift lobby",
        latency_ms=120,
        **kwargs,
    )


def _resolver(gateway, dictionary, decision_logger, **kwargs):
    return ResolveClassificationUseCase(
        gateway=gateway, decision_logger=decision_logger, dictionary=dictionary, **kwargs
    )


# ─── Tests ───────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_confident_rule_skips_gateway(dictionary, decision_logger):
    gateway = FakeGateway(_judgment())
    result = await _resolver(gateway, dictionary, decision_logger).execute(
        "The drain is blocked again"
    )

    assert gateway.requests == []
    assert result.skill_group == SkillGroup.PLUMBING
    assert result.issue_code == "drainage_blockage"
    assert result.decision_source == DecisionSource.RULE
    assert result.zone == Zone.A_CONFIDENT
    assert result.escalation_used is False
    assert decision_logger.event_names() == ["classification.resolved"]


@pytest.mark.asyncio
async def test_ambiguous_rule_accepts_gateway_judgment(dictionary, decision_logger):
    gateway = FakeGateway(_judgment(
        SkillGroup.PLUMBING, secondary_skill_group=SkillGroup.VENDOR,
        priority=Priority.HIGH, risk_flag="water_damage",
    ))
    result = await _resolver(gateway, dictionary, decision_logger).execute(
        "water leak near the lift", ticket_id="T1"
    )

    assert result.skill_group == SkillGroup.PLUMBING
    assert result.issue_code == "water_leakage"
    assert result.confidence == Confidence.HIGH
    assert result.decision_source == DecisionSource.LLM
    assert result.escalation_used and result.escalation_accepted
    assert result.secondary_skill_group == SkillGroup.VENDOR
    assert result.priority == Priority.HIGH
    assert result.risk_flag == "water_damage"
    # Rule context is preserved for audit
    assert result.rule_result.skill_group == SkillGroup.VENDOR
    assert result.zone == Zone.B_AMBIGUOUS
    assert decision_logger.event_names() == [
        "rule.low_confidence", "llm.invoked", "classification.resolved",
    ]


@pytest.mark.asyncio
async def test_gateway_request_carries_candidates_and_scores(dictionary, decision_logger):
    gateway = FakeGateway(_judgment())
    await _resolver(gateway, dictionary, decision_logger).execute("water leak near the lift")

    request = gateway.requests[0]
    assert request.ticket_text == "water leak near the lift"
    assert request.candidate_buckets == ["plumbing", "vendor"]
    assert request.rule_scores["plumbing"] == 5
    assert request.rule_scores["lift_breakdown"] == 1


@pytest.mark.asyncio
async def test_no_match_offers_every_group(dictionary, decision_logger):
    gateway = FakeGateway(_judgment(SkillGroup.SOFT_SERVICE))
    result = await _resolver(gateway, dictionary, decision_logger).execute("random unrelated note")

    assert gateway.requests[0].candidate_buckets == [
        "vendor", "technical", "plumbing", "soft_service",
    ]
    assert result.skill_group == SkillGroup.SOFT_SERVICE
    assert result.issue_code is None
    assert result.zone == Zone.C_ANOMALOUS


@pytest.mark.asyncio
async def test_gateway_error_keeps_rule_result(dictionary, decision_logger):
    gateway = FakeGateway(error=GatewayTransportError("HTTP 503"))
    result = await _resolver(gateway, dictionary, decision_logger).execute(
        "water leak near the lift"
    )

    assert result.skill_group == SkillGroup.VENDOR
    assert result.issue_code == "lift_breakdown"
    assert result.decision_source == DecisionSource.RULE
    assert result.escalation_used is True
    assert result.escalation_accepted is False
    failed = [e for e in decision_logger.events if e.name == "llm.failed"]
    assert failed[0].payload["error"] == "GatewayTransportError"


@pytest.mark.asyncio
async def test_unknown_category_is_not_coerced(dictionary, decision_logger):
    gateway = FakeGateway(error=UnknownSkillGroupError("Unknown primary_category: 'security'"))
    result = await _resolver(gateway, dictionary, decision_logger).execute("random unrelated note")

    assert result.decision_source == DecisionSource.RULE
    assert result.skill_group == SkillGroup.TECHNICAL
    assert result.confidence == Confidence.LOW


@pytest.mark.asyncio
async def test_unexpected_gateway_exception_is_recovered(dictionary, decision_logger):
    gateway = FakeGateway(error=RuntimeError("adapter bug"))
    result = await _resolver(gateway, dictionary, decision_logger).execute(
        "water leak near the lift"
    )
    assert result.decision_source == DecisionSource.RULE
    assert "llm.failed" in decision_logger.event_names()


@pytest.mark.asyncio
async def test_slow_gateway_times_out(dictionary, decision_logger):
    gateway = FakeGateway(_judgment(), delay=1.0)
    resolver = _resolver(gateway, dictionary, decision_logger, timeout_seconds=0.01)
    result = await resolver.execute("water leak near the lift")

    assert result.decision_source == DecisionSource.RULE
    failed = [e for e in decision_logger.events if e.name == "llm.failed"]
    assert failed[0].payload["error"] == "GatewayTimeoutError"


@pytest.mark.asyncio
async def test_forced_escalation_calls_gateway_on_confident_rule(dictionary, decision_logger):
    gateway = FakeGateway(_judgment(SkillGroup.PLUMBING))
    result = await _resolver(gateway, dictionary, decision_logger).execute(
        "The drain is blocked again", policy=EscalationPolicy(force_escalation=True)
    )

    assert len(gateway.requests) == 1
    assert result.decision_source == DecisionSource.LLM
    assert result.issue_code == "drainage_blockage"
    assert "rule.low_confidence" not in decision_logger.event_names()


@pytest.mark.asyncio
async def test_default_policy_applies_when_none_given(dictionary, decision_logger):
    gateway = FakeGateway(_judgment(SkillGroup.PLUMBING))
    resolver = _resolver(
        gateway, dictionary, decision_logger,
        default_policy=EscalationPolicy(force_escalation=True),
    )
    await resolver.execute("The drain is blocked again")
    assert len(gateway.requests) == 1


@pytest.mark.asyncio
async def test_top_n_limits_candidates(dictionary, decision_logger):
    gateway = FakeGateway(_judgment())
    resolver = _resolver(gateway, dictionary, decision_logger, top_n=1)
    await resolver.execute("water leak near the lift")
    assert gateway.requests[0].candidate_buckets == ["plumbing"]
