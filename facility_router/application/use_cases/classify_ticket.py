"""ClassifyTicketUseCase / OverrideClassificationUseCase — decisions bound to a stored ticket."""

from __future__ import annotations

import logging

from facility_router.application.ports.decision_logger import (
    DecisionEvent,
    DecisionLogger,
    DecisionRecord,
)
from facility_router.application.ports.ticket_repo import TicketRepository
from facility_router.application.use_cases.resolve_classification import (
    EscalationPolicy,
    ResolveClassificationUseCase,
)
from facility_router.domain.entities.classification import ResolvedClassification
from facility_router.domain.policies.confidence import ConfidenceThresholds, analyze_confidence
from facility_router.domain.policies.rule_engine import classify_text
from facility_router.domain.value_objects.enums import Confidence, DecisionSource, SkillGroup
from facility_router.domain.value_objects.issue_dictionary import (
    IssueDictionary,
    default_dictionary,
)

logger = logging.getLogger(__name__)


class TicketNotFoundError(LookupError):
    pass


class ClassifyTicketUseCase:
    """Classify (or re-classify) a ticket and record the decision."""

    def __init__(
        self,
        resolver: ResolveClassificationUseCase,
        ticket_repo: TicketRepository,
        decision_logger: DecisionLogger,
    ):
        self._resolver = resolver
        self._tickets = ticket_repo
        self._log = decision_logger

    async def execute(
        self,
        ticket_id: str,
        text: str | None = None,
        policy: EscalationPolicy | None = None,
    ) -> ResolvedClassification:
        """Resolve the ticket's skill group and store it on the ticket row.

        Args:
            ticket_id: id of an existing ticket.
            text: classification text; defaults to the stored title + description.
            policy: escalation policy override for this call.

        Raises:
            TicketNotFoundError: if the ticket does not exist.
        """
        ticket = await self._tickets.get_by_id(ticket_id)
        if ticket is None:
            raise TicketNotFoundError(f"Ticket {ticket_id} not found")

        if text is None:
            text = ticket.classification_text()
        resolution = await self._resolver.execute(text, policy=policy, ticket_id=ticket_id)
        await self._tickets.save_classification(ticket_id, resolution)

        _record(self._log, ticket_id, resolution)
        return resolution


class OverrideClassificationUseCase:
    """Manual re-categorisation: a new decision with source=human."""

    def __init__(
        self,
        ticket_repo: TicketRepository,
        decision_logger: DecisionLogger,
        dictionary: IssueDictionary | None = None,
        thresholds: ConfidenceThresholds | None = None,
    ):
        self._tickets = ticket_repo
        self._log = decision_logger
        self._dictionary = dictionary or default_dictionary()
        self._thresholds = thresholds or ConfidenceThresholds()

    async def execute(
        self,
        ticket_id: str,
        skill_group: SkillGroup,
        issue_code: str | None = None,
        reason: str | None = None,
        actor: str | None = None,
    ) -> ResolvedClassification:
        """Raises:
            TicketNotFoundError: unknown ticket.
            ValueError: issue code does not belong to the skill group.
        """
        if issue_code is not None and issue_code not in self._dictionary.issue_codes(skill_group):
            raise ValueError(f"Issue code {issue_code} is not part of {skill_group.value}")

        ticket = await self._tickets.get_by_id(ticket_id)
        if ticket is None:
            raise TicketNotFoundError(f"Ticket {ticket_id} not found")

        # Rule context is recomputed so the audit trail shows what the rules said
        text = ticket.classification_text()
        rule = classify_text(text, self._dictionary)
        analysis = analyze_confidence(rule, text, self._thresholds)

        resolution = ResolvedClassification(
            issue_code=issue_code,
            skill_group=skill_group,
            confidence=Confidence.HIGH,
            zone=analysis.zone,
            decision_source=DecisionSource.HUMAN,
            escalation_used=False,
            escalation_accepted=False,
            rule_result=rule,
            confidence_analysis=analysis,
            rationale=reason,
        )
        await self._tickets.save_classification(ticket_id, resolution)
        logger.info(
            "Ticket %s: classification overridden to %s/%s by %s",
            ticket_id, skill_group.value, issue_code, actor or "unknown",
        )

        _record(self._log, ticket_id, resolution, actor=actor)
        return resolution


def _record(
    decision_logger: DecisionLogger,
    ticket_id: str,
    resolution: ResolvedClassification,
    actor: str | None = None,
) -> None:
    """Queue the audit record and the ``ticket.categorized`` event; never raises."""
    try:
        decision_logger.submit(DecisionRecord(ticket_id=ticket_id, resolution=resolution, actor=actor))
        decision_logger.submit(DecisionEvent(
            name="ticket.categorized",
            ticket_id=ticket_id,
            payload={
                "final_category": resolution.skill_group.value,
                "secondary_category": (
                    resolution.secondary_skill_group.value
                    if resolution.secondary_skill_group else None
                ),
                "priority": (
                    resolution.priority.value if resolution.priority
                    else ("medium" if resolution.rule_result.confidence == Confidence.HIGH else "low")
                ),
                "risk_flag": resolution.risk_flag,
                "decision_source": resolution.decision_source.value,
                "reasoning": resolution.rationale,
            },
        ))
    except Exception:
        logger.exception("Failed to queue audit record for ticket %s", ticket_id)
