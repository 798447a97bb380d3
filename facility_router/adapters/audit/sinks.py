"""Decision sinks: structured log lines and an optional webhook."""

from __future__ import annotations

import json
import logging

import httpx

from facility_router.application.ports.decision_logger import (
    DecisionEvent,
    DecisionItem,
    DecisionRecord,
    DecisionSink,
)
from facility_router.domain.entities.classification import ResolvedClassification

logger = logging.getLogger(__name__)


def resolution_to_dict(r: ResolvedClassification) -> dict:
    """Flatten a decision into the classification-log shape."""
    rule = r.rule_result
    analysis = r.confidence_analysis
    judgment = r.escalation_result
    usage = judgment.token_usage if judgment else None
    return {
        "issue_code": r.issue_code,
        "final_bucket": r.skill_group.value,
        "confidence": r.confidence.value,
        "zone": analysis.zone.value,
        "decision_source": r.decision_source.value,
        "rule_top_bucket": rule.skill_group.value,
        "rule_issue_code": rule.issue_code,
        "rule_scores": rule.scores.as_dict(),
        "rule_margin": rule.margin,
        "entropy": analysis.entropy,
        "normalized_entropy": analysis.normalized_entropy,
        "escalation_reason": analysis.reason,
        "llm_used": r.escalation_used,
        "llm_accepted": r.escalation_accepted,
        "llm_output": judgment.primary_skill_group.value if judgment else None,
        "llm_secondary": (
            judgment.secondary_skill_group.value
            if judgment and judgment.secondary_skill_group else None
        ),
        "llm_rationale": judgment.rationale if judgment else None,
        "llm_latency_ms": judgment.latency_ms if judgment else None,
        "prompt_tokens": usage.prompt_tokens if usage else None,
        "completion_tokens": usage.completion_tokens if usage else None,
        "total_tokens": usage.total_tokens if usage else None,
        "priority": r.priority.value if r.priority else None,
        "risk_flag": r.risk_flag,
        "rationale": r.rationale,
    }


def item_to_dict(item: DecisionItem) -> dict:
    if isinstance(item, DecisionEvent):
        return {
            "type": "event",
            "event": item.name,
            "ticket_id": item.ticket_id,
            "payload": item.payload,
            "occurred_at": item.occurred_at.isoformat(),
        }
    return {
        "type": "classification",
        "ticket_id": item.ticket_id,
        "actor": item.actor,
        "recorded_at": item.recorded_at.isoformat(),
        **resolution_to_dict(item.resolution),
    }


class LoggingEventSink(DecisionSink):
    """Writes every item as one JSON line on the ``facility_router.decisions`` logger."""

    def __init__(self, name: str = "facility_router.decisions"):
        self._log = logging.getLogger(name)

    async def write(self, item: DecisionItem) -> None:
        self._log.info("%s", json.dumps(item_to_dict(item), ensure_ascii=False, default=str))


class WebhookEventSink(DecisionSink):
    """POSTs decision events (not full records) to an external URL."""

    def __init__(
        self,
        url: str,
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._url = url
        self._timeout = timeout
        self._transport = transport

    async def write(self, item: DecisionItem) -> None:
        if isinstance(item, DecisionRecord):
            return
        async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
            response = await client.post(self._url, json=item_to_dict(item))
            response.raise_for_status()
        logger.debug("Webhook delivered %s for ticket %s", item.name, item.ticket_id)
