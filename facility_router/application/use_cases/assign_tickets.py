"""AssignmentEngine / AssignTicketsUseCase — skill-pool round-robin over a batch."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable

from facility_router.application.ports.assignment_repo import AssignmentRepository
from facility_router.application.ports.ticket_repo import TicketRepository
from facility_router.application.ports.worker_repo import WorkerSkillRepository
from facility_router.domain.entities.assignment import (
    AssignableTicket,
    AssignmentDecision,
    AssignmentSummary,
)
from facility_router.domain.entities.worker import WorkerSkillEntry
from facility_router.domain.policies.round_robin import candidate_pool, pick_least_recent
from facility_router.domain.value_objects.enums import AssignmentStatus

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AssignmentEngine:
    """Least-recently-assigned distribution of tickets over the skill index.

    Tickets of one batch are processed strictly in order: each pick depends on
    the timestamps advanced by the previous one.
    """

    def __init__(
        self,
        assignment_repo: AssignmentRepository,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._assignments = assignment_repo
        self._clock = clock

    async def assign_batch(
        self,
        tickets: list[AssignableTicket],
        skill_index: list[WorkerSkillEntry],
    ) -> list[AssignmentDecision]:
        """Assign each ticket to the most idle eligible worker.

        Per ticket:
        1. Pool = available workers of the ticket's skill group, else everyone
           available (general pool); checked-in workers preferred.
        2. Pick the oldest ``last_assigned_at`` (never-assigned first).
        3. Advance that worker's in-memory timestamp, then persist.
        4. Empty pool → waitlisted; persistence failure → error, batch continues.
        """
        rows_by_worker: dict[str, list[WorkerSkillEntry]] = {}
        for entry in skill_index:
            rows_by_worker.setdefault(entry.worker_id, []).append(entry)

        decisions: list[AssignmentDecision] = []
        for ticket in tickets:
            pool, general = candidate_pool(skill_index, ticket.skill_group)

            if not pool:
                decisions.append(await self._waitlist(ticket))
                continue

            if general and ticket.skill_group is not None:
                logger.warning(
                    "Ticket %s: no available %s workers, using general pool",
                    ticket.ticket_id, ticket.skill_group.value,
                )

            winner = pick_least_recent(pool)
            worker_rows = rows_by_worker[winner.worker_id]
            previous = [row.last_assigned_at for row in worker_rows]
            assigned_at = self._clock()
            for row in worker_rows:
                row.last_assigned_at = assigned_at

            try:
                await self._assignments.record_assignment(
                    ticket.ticket_id, winner.worker_id, ticket.property_id, assigned_at
                )
            except Exception as e:
                logger.exception("Failed to persist assignment of ticket %s", ticket.ticket_id)
                for row, ts in zip(worker_rows, previous):
                    row.last_assigned_at = ts
                decisions.append(AssignmentDecision(
                    ticket_id=ticket.ticket_id,
                    assigned_worker_id=None,
                    status=AssignmentStatus.ERROR,
                    error=str(e),
                ))
                continue

            logger.info("Ticket %s → worker %s", ticket.ticket_id, winner.worker_id)
            decisions.append(AssignmentDecision(
                ticket_id=ticket.ticket_id,
                assigned_worker_id=winner.worker_id,
                status=AssignmentStatus.ASSIGNED,
            ))

        return decisions

    async def _waitlist(self, ticket: AssignableTicket) -> AssignmentDecision:
        logger.warning("Ticket %s: no available workers, waitlisted", ticket.ticket_id)
        try:
            await self._assignments.record_waitlist(ticket.ticket_id)
        except Exception as e:
            logger.exception("Failed to persist waitlist status of ticket %s", ticket.ticket_id)
            return AssignmentDecision(
                ticket_id=ticket.ticket_id,
                assigned_worker_id=None,
                status=AssignmentStatus.ERROR,
                error=str(e),
            )
        return AssignmentDecision(
            ticket_id=ticket.ticket_id,
            assigned_worker_id=None,
            status=AssignmentStatus.WAITLISTED,
        )


class AssignTicketsUseCase:
    """Bulk-assign entry point: ticket ids + property → summary."""

    def __init__(
        self,
        engine: AssignmentEngine,
        ticket_repo: TicketRepository,
        worker_repo: WorkerSkillRepository,
    ):
        self._engine = engine
        self._tickets = ticket_repo
        self._workers = worker_repo

    async def execute(self, ticket_ids: list[str], property_id: str) -> AssignmentSummary:
        """Assign the requested tickets of one property.

        Ids that are unknown, belong to another property or are no longer
        awaiting assignment are reported as ``error`` decisions so that every
        requested ticket appears in the summary exactly once.

        The skill index is read first: with a locking store this serializes
        batches of the same property, so ticket statuses read afterwards
        already reflect any batch that committed while this one waited.
        """
        requested = list(dict.fromkeys(ticket_ids))
        skill_index = await self._workers.get_skill_index(property_id) if requested else []
        found = {t.id: t for t in await self._tickets.get_many(requested)}

        batch: list[AssignableTicket] = []
        rejected: dict[str, AssignmentDecision] = {}
        for ticket_id in requested:
            ticket = found.get(ticket_id)
            reason = None
            if ticket is None:
                reason = "Ticket not found"
            elif ticket.property_id != property_id:
                reason = f"Ticket belongs to property {ticket.property_id}"
            elif not ticket.is_awaiting_assignment():
                reason = f"Ticket is not awaiting assignment (status={ticket.status.value})"

            if reason is not None:
                rejected[ticket_id] = AssignmentDecision(
                    ticket_id=ticket_id,
                    assigned_worker_id=None,
                    status=AssignmentStatus.ERROR,
                    error=reason,
                )
            else:
                batch.append(AssignableTicket(
                    ticket_id=ticket.id,
                    property_id=ticket.property_id,
                    skill_group=ticket.skill_group,
                ))

        logger.info(
            "Bulk assign: %d tickets, %d skill rows for property %s",
            len(batch), len(skill_index), property_id,
        )
        assigned = {d.ticket_id: d for d in await self._engine.assign_batch(batch, skill_index)}

        summary = AssignmentSummary(
            results=[rejected.get(tid) or assigned[tid] for tid in requested]
        )
        logger.info(
            "Bulk assign complete: %d assigned, %d waitlisted, %d errors",
            summary.assigned, summary.waitlisted, summary.errors,
        )
        return summary
