"""SQLAlchemy repository implementations."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from facility_router.adapters.audit.sinks import resolution_to_dict
from facility_router.adapters.persistence.models import (
    ClassificationLogModel,
    TicketModel,
    WorkerSkillModel,
)
from facility_router.application.ports.assignment_repo import (
    AssignmentRepository,
    TicketNotAssignableError,
)
from facility_router.application.ports.decision_logger import (
    DecisionItem,
    DecisionRecord,
    DecisionSink,
)
from facility_router.application.ports.ticket_repo import TicketRepository
from facility_router.application.ports.worker_repo import WorkerSkillRepository
from facility_router.domain.entities.classification import ResolvedClassification
from facility_router.domain.entities.ticket import Ticket
from facility_router.domain.entities.worker import WorkerSkillEntry
from facility_router.domain.value_objects.enums import (
    AWAITING_ASSIGNMENT,
    SkillGroup,
    TicketStatus,
)

_AWAITING = sorted(s.value for s in AWAITING_ASSIGNMENT)

# ─── Mappers ─────────────────────────────────────────────────────────


def _ticket_to_domain(m: TicketModel) -> Ticket:
    return Ticket(
        id=m.id,
        property_id=m.property_id,
        title=m.title,
        description=m.description,
        status=TicketStatus(m.status),
        skill_group=SkillGroup(m.skill_group) if m.skill_group else None,
        issue_code=m.issue_code,
        assigned_to=m.assigned_to,
        assigned_at=m.assigned_at,
    )


def _skill_to_domain(m: WorkerSkillModel) -> WorkerSkillEntry:
    return WorkerSkillEntry(
        worker_id=m.worker_id,
        property_id=m.property_id,
        skill_group=SkillGroup(m.skill_group),
        is_available=m.is_available,
        is_checked_in=m.is_checked_in,
        last_assigned_at=m.last_assigned_at,
    )


def _log_from_record(record: DecisionRecord) -> ClassificationLogModel:
    data = resolution_to_dict(record.resolution)
    return ClassificationLogModel(
        ticket_id=record.ticket_id,
        rule_top_bucket=data["rule_top_bucket"],
        rule_issue_code=data["rule_issue_code"],
        rule_scores=data["rule_scores"],
        rule_margin=data["rule_margin"],
        entropy=data["entropy"],
        zone=data["zone"],
        escalation_reason=data["escalation_reason"],
        llm_used=data["llm_used"],
        llm_output=data["llm_output"],
        llm_secondary=data["llm_secondary"],
        llm_rationale=data["llm_rationale"],
        llm_latency_ms=data["llm_latency_ms"],
        prompt_tokens=data["prompt_tokens"],
        completion_tokens=data["completion_tokens"],
        total_tokens=data["total_tokens"],
        final_bucket=data["final_bucket"],
        issue_code=data["issue_code"],
        decision_source=data["decision_source"],
        actor=record.actor,
    )


# ─── Repositories ────────────────────────────────────────────────────


class SqlTicketRepository(TicketRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def get_by_id(self, ticket_id: str) -> Ticket | None:
        m = await self._s.get(TicketModel, ticket_id)
        return _ticket_to_domain(m) if m else None

    async def get_many(self, ticket_ids: list[str]) -> list[Ticket]:
        if not ticket_ids:
            return []
        result = await self._s.execute(
            select(TicketModel).where(TicketModel.id.in_(ticket_ids)).order_by(TicketModel.id)
        )
        return [_ticket_to_domain(m) for m in result.scalars()]

    async def save_classification(
        self, ticket_id: str, resolution: ResolvedClassification
    ) -> None:
        await self._s.execute(
            update(TicketModel)
            .where(TicketModel.id == ticket_id)
            .values(
                skill_group=resolution.skill_group.value,
                issue_code=resolution.issue_code,
                priority=resolution.priority.value if resolution.priority else None,
                risk_flag=resolution.risk_flag,
                decision_source=resolution.decision_source.value,
            )
        )
        await self._s.flush()


class SqlWorkerSkillRepository(WorkerSkillRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def get_skill_index(self, property_id: str) -> list[WorkerSkillEntry]:
        # Row locks are held until the batch transaction ends
        result = await self._s.execute(
            select(WorkerSkillModel)
            .where(WorkerSkillModel.property_id == property_id)
            .order_by(WorkerSkillModel.worker_id, WorkerSkillModel.skill_group)
            .with_for_update()
        )
        return [_skill_to_domain(m) for m in result.scalars()]


class SqlAssignmentRepository(AssignmentRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def record_assignment(
        self, ticket_id: str, worker_id: str, property_id: str, assigned_at: datetime
    ) -> None:
        async with self._s.begin_nested():
            result = await self._s.execute(
                update(TicketModel)
                .where(
                    TicketModel.id == ticket_id,
                    TicketModel.status.in_(_AWAITING),
                    TicketModel.assigned_to.is_(None),
                )
                .values(
                    status=TicketStatus.ASSIGNED.value,
                    assigned_to=worker_id,
                    assigned_at=assigned_at,
                )
            )
            if result.rowcount == 0:
                raise TicketNotAssignableError(f"Ticket {ticket_id} is no longer awaiting assignment")
            await self._s.execute(
                update(WorkerSkillModel)
                .where(
                    WorkerSkillModel.worker_id == worker_id,
                    WorkerSkillModel.property_id == property_id,
                )
                .values(last_assigned_at=assigned_at)
            )

    async def record_waitlist(self, ticket_id: str) -> None:
        async with self._s.begin_nested():
            result = await self._s.execute(
                update(TicketModel)
                .where(TicketModel.id == ticket_id, TicketModel.status.in_(_AWAITING))
                .values(status=TicketStatus.WAITLIST.value)
            )
            if result.rowcount == 0:
                raise TicketNotAssignableError(f"Ticket {ticket_id} is no longer awaiting assignment")


class SqlClassificationLogSink(DecisionSink):
    """Persists DecisionRecords as ``ticket_classification_logs`` rows.

    Runs on the audit worker, outside any request, so it opens its own session.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def write(self, item: DecisionItem) -> None:
        if not isinstance(item, DecisionRecord):
            return
        async with self._session_factory() as session:
            session.add(_log_from_record(item))
            await session.commit()
