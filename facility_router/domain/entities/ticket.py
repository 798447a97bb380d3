"""Ticket entity — the slice of a maintenance ticket the routing core reads."""

from dataclasses import dataclass
from datetime import datetime

from facility_router.domain.value_objects.enums import (
    AWAITING_ASSIGNMENT,
    SkillGroup,
    TicketStatus,
)


@dataclass
class Ticket:
    id: str
    property_id: str
    title: str | None
    description: str | None
    status: TicketStatus = TicketStatus.OPEN
    skill_group: SkillGroup | None = None
    issue_code: str | None = None
    assigned_to: str | None = None
    assigned_at: datetime | None = None

    def classification_text(self) -> str:
        """Title and description joined, as fed to the classifier."""
        parts = [p.strip() for p in (self.title, self.description) if p and p.strip()]
        return " ".join(parts)

    def is_awaiting_assignment(self) -> bool:
        return self.status in AWAITING_ASSIGNMENT and self.assigned_to is None
