"""Classification endpoints — ad-hoc text, stored tickets, human override."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from facility_router.application.use_cases.classify_ticket import (
    ClassifyTicketUseCase,
    OverrideClassificationUseCase,
    TicketNotFoundError,
)
from facility_router.application.use_cases.resolve_classification import (
    EscalationPolicy,
    ResolveClassificationUseCase,
)
from facility_router.domain.entities.classification import ResolvedClassification
from facility_router.domain.value_objects.enums import SkillGroup
from facility_router.infrastructure.api.dependencies import (
    get_classify_ticket_uc,
    get_override_uc,
    get_resolver,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["classification"])


class ClassifyRequest(BaseModel):
    text: str
    force_escalation: bool | None = None


class TicketClassifyRequest(BaseModel):
    text: str | None = None
    force_escalation: bool | None = None


class OverrideRequest(BaseModel):
    skill_group: SkillGroup
    issue_code: str | None = None
    reason: str | None = None
    actor: str | None = None


def _policy(force_escalation: bool | None) -> EscalationPolicy | None:
    if force_escalation is None:
        return None
    return EscalationPolicy(force_escalation=force_escalation)


@router.post("/classify")
async def classify_text_endpoint(
    body: ClassifyRequest,
    resolver: ResolveClassificationUseCase = Depends(get_resolver),
):
    """Classify free text without touching any ticket."""
    resolution = await resolver.execute(body.text, policy=_policy(body.force_escalation))
    return _serialize_resolution(resolution)


@router.post("/tickets/{ticket_id}/classify")
async def classify_ticket(
    ticket_id: str,
    body: TicketClassifyRequest | None = None,
    uc: ClassifyTicketUseCase = Depends(get_classify_ticket_uc),
):
    """Classify (or re-classify) a stored ticket and save the result on it."""
    body = body or TicketClassifyRequest()
    try:
        resolution = await uc.execute(
            ticket_id, text=body.text, policy=_policy(body.force_escalation)
        )
    except TicketNotFoundError:
        raise HTTPException(status_code=404, detail="Ticket not found")
    return {"ticket_id": ticket_id, **_serialize_resolution(resolution)}


@router.patch("/tickets/{ticket_id}/classification")
async def override_classification(
    ticket_id: str,
    body: OverrideRequest,
    uc: OverrideClassificationUseCase = Depends(get_override_uc),
):
    """Manually set a ticket's skill group (decision_source=human)."""
    try:
        resolution = await uc.execute(
            ticket_id,
            skill_group=body.skill_group,
            issue_code=body.issue_code,
            reason=body.reason,
            actor=body.actor,
        )
    except TicketNotFoundError:
        raise HTTPException(status_code=404, detail="Ticket not found")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"ticket_id": ticket_id, **_serialize_resolution(resolution)}


def _serialize_resolution(r: ResolvedClassification) -> dict:
    """Convert a decision into an API response dict."""
    rule = r.rule_result
    analysis = r.confidence_analysis
    data = {
        "issue_code": r.issue_code,
        "skill_group": r.skill_group.value,
        "confidence": r.confidence.value,
        "zone": r.zone.value,
        "decision_source": r.decision_source.value,
        "escalation_used": r.escalation_used,
        "escalation_accepted": r.escalation_accepted,
        "secondary_skill_group": (
            r.secondary_skill_group.value if r.secondary_skill_group else None
        ),
        "priority": r.priority.value if r.priority else None,
        "risk_flag": r.risk_flag,
        "rationale": r.rationale,
        "rule": {
            "issue_code": rule.issue_code,
            "skill_group": rule.skill_group.value,
            "confidence": rule.confidence.value,
            "margin": rule.margin,
            "scores": rule.scores.as_dict(),
            "matched_keywords": list(rule.matched_keywords),
        },
        "analysis": {
            "zone": analysis.zone.value,
            "entropy": analysis.entropy,
            "normalized_entropy": analysis.normalized_entropy,
            "needs_escalation": analysis.needs_escalation,
            "reason": analysis.reason,
        },
    }

    if r.escalation_result:
        j = r.escalation_result
        data["escalation"] = {
            "primary_skill_group": j.primary_skill_group.value,
            "latency_ms": j.latency_ms,
            "token_usage": (
                {
                    "prompt_tokens": j.token_usage.prompt_tokens,
                    "completion_tokens": j.token_usage.completion_tokens,
                    "total_tokens": j.token_usage.total_tokens,
                }
                if j.token_usage else None
            ),
        }
    else:
        data["escalation"] = None

    return data
