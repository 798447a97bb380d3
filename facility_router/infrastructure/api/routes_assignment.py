"""Assignment endpoints — bulk round-robin assignment."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from facility_router.application.use_cases.assign_tickets import AssignTicketsUseCase
from facility_router.domain.entities.assignment import AssignmentSummary
from facility_router.infrastructure.api.dependencies import get_assign_tickets_uc

router = APIRouter(prefix="/tickets", tags=["assignment"])


class BulkAssignRequest(BaseModel):
    property_id: str
    ticket_ids: list[str] = Field(default_factory=list)


@router.post("/bulk-assign")
async def bulk_assign(
    body: BulkAssignRequest,
    uc: AssignTicketsUseCase = Depends(get_assign_tickets_uc),
):
    """Assign the given tickets of one property to the least recently assigned workers."""
    if not body.ticket_ids:
        raise HTTPException(status_code=400, detail="ticket_ids must not be empty")
    summary = await uc.execute(body.ticket_ids, body.property_id)
    return _serialize_summary(summary)


def _serialize_summary(summary: AssignmentSummary) -> dict:
    return {
        "total": summary.total,
        "assigned": summary.assigned,
        "waitlisted": summary.waitlisted,
        "errors": summary.errors,
        "results": [
            {
                "ticket_id": d.ticket_id,
                "assigned_worker_id": d.assigned_worker_id,
                "status": d.status.value,
                "error": d.error,
            }
            for d in summary.results
        ],
    }
