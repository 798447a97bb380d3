"""Wire schema of the reasoning service response and its mapping to LLMJudgment."""

from __future__ import annotations

import json

from pydantic import BaseModel, ConfigDict, ValidationError

from facility_router.application.ports.reasoning_gateway import (
    GatewayResponseError,
    UnknownSkillGroupError,
)
from facility_router.domain.entities.classification import LLMJudgment, TokenUsage
from facility_router.domain.value_objects.enums import Priority, SkillGroup

SKILL_GROUP_MAP: dict[str, SkillGroup] = {g.value: g for g in SkillGroup}

PRIORITY_MAP: dict[str, Priority] = {
    **{p.value: p for p in Priority},
    "urgent": Priority.CRITICAL,
    "emergency": Priority.CRITICAL,
    "p1": Priority.CRITICAL,
    "p2": Priority.HIGH,
    "p3": Priority.MEDIUM,
    "p4": Priority.LOW,
    "normal": Priority.MEDIUM,
}


class JudgmentPayload(BaseModel):
    """``{primary_category, secondary_category?, priority?, risk_flag?, reasoning}``.

    Extra fields are rejected. Only ``primary_category`` is held to the known
    skill groups; the optional labels are free strings.
    """

    model_config = ConfigDict(extra="forbid")

    primary_category: str
    secondary_category: str | None = None
    priority: str | None = None
    risk_flag: str | None = None
    reasoning: str


def _label(value: str | None) -> str:
    return (value or "").strip().lower()


def parse_judgment(
    raw: str | bytes | dict,
    latency_ms: int,
    token_usage: TokenUsage | None = None,
) -> LLMJudgment:
    """Validate a raw response body and map it to an LLMJudgment.

    ``secondary_category`` and ``priority`` are mapped when recognised and
    left as None otherwise; they never fail the judgment.

    Raises:
        GatewayResponseError: body is not JSON or violates the schema.
        UnknownSkillGroupError: primary_category is outside the known skill groups.
    """
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as e:
            raise GatewayResponseError(f"Response is not valid JSON: {e}") from e
    if not isinstance(raw, dict):
        raise GatewayResponseError(f"Response must be a JSON object, got {type(raw).__name__}")

    try:
        payload = JudgmentPayload.model_validate(raw)
    except ValidationError as e:
        raise GatewayResponseError(f"Response does not match schema: {e}") from e

    primary = SKILL_GROUP_MAP.get(payload.primary_category)
    if primary is None:
        raise UnknownSkillGroupError(f"Unknown primary_category: {payload.primary_category!r}")

    return LLMJudgment(
        primary_skill_group=primary,
        secondary_skill_group=SKILL_GROUP_MAP.get(_label(payload.secondary_category)),
        priority=PRIORITY_MAP.get(_label(payload.priority)),
        risk_flag=payload.risk_flag or None,
        rationale=payload.reasoning,
        latency_ms=latency_ms,
        token_usage=token_usage,
    )
