"""FastAPI dependency injection — wires adapters into use cases."""

from __future__ import annotations

import logging

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from facility_router.adapters.audit.dispatcher import AuditDispatcher
from facility_router.adapters.audit.sinks import LoggingEventSink, WebhookEventSink
from facility_router.adapters.llm.factory import build_gateway
from facility_router.adapters.persistence.database import async_session_factory, get_session
from facility_router.adapters.persistence.repositories import (
    SqlAssignmentRepository,
    SqlClassificationLogSink,
    SqlTicketRepository,
    SqlWorkerSkillRepository,
)
from facility_router.application.use_cases.assign_tickets import (
    AssignmentEngine,
    AssignTicketsUseCase,
)
from facility_router.application.use_cases.classify_ticket import (
    ClassifyTicketUseCase,
    OverrideClassificationUseCase,
)
from facility_router.application.use_cases.resolve_classification import (
    EscalationPolicy,
    ResolveClassificationUseCase,
)
from facility_router.config import settings
from facility_router.domain.policies.confidence import ConfidenceThresholds
from facility_router.domain.value_objects.issue_dictionary import load_issue_dictionary

logger = logging.getLogger(__name__)

# Singletons: loaded once per process
_dictionary = load_issue_dictionary(settings.issue_dictionary_path)
_thresholds = ConfidenceThresholds(
    margin_threshold=settings.confidence_margin_threshold,
    entropy_threshold=settings.confidence_entropy_threshold,
    min_text_length=settings.min_text_length,
    min_word_count=settings.min_word_count,
)
_gateway = build_gateway(settings)

_sinks = [LoggingEventSink(), SqlClassificationLogSink(async_session_factory)]
if settings.decision_webhook_url:
    _sinks.append(WebhookEventSink(settings.decision_webhook_url))
    logger.info("Decision events forwarded to %s", settings.decision_webhook_url)
audit_dispatcher = AuditDispatcher(_sinks, maxsize=settings.audit_queue_size)


def default_policy() -> EscalationPolicy:
    return EscalationPolicy(force_escalation=settings.force_escalation)


def get_resolver() -> ResolveClassificationUseCase:
    return ResolveClassificationUseCase(
        gateway=_gateway,
        decision_logger=audit_dispatcher,
        dictionary=_dictionary,
        thresholds=_thresholds,
        default_policy=default_policy(),
        timeout_seconds=settings.reasoning_timeout_seconds,
        top_n=settings.escalation_top_n,
    )


def get_classify_ticket_uc(
    session: AsyncSession = Depends(get_session),
) -> ClassifyTicketUseCase:
    return ClassifyTicketUseCase(
        resolver=get_resolver(),
        ticket_repo=SqlTicketRepository(session),
        decision_logger=audit_dispatcher,
    )


def get_override_uc(
    session: AsyncSession = Depends(get_session),
) -> OverrideClassificationUseCase:
    return OverrideClassificationUseCase(
        ticket_repo=SqlTicketRepository(session),
        decision_logger=audit_dispatcher,
        dictionary=_dictionary,
        thresholds=_thresholds,
    )


def get_assign_tickets_uc(
    session: AsyncSession = Depends(get_session),
) -> AssignTicketsUseCase:
    return AssignTicketsUseCase(
        engine=AssignmentEngine(SqlAssignmentRepository(session)),
        ticket_repo=SqlTicketRepository(session),
        worker_repo=SqlWorkerSkillRepository(session),
    )
