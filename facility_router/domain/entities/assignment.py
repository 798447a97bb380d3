"""Assignment entities — tickets to route and the per-ticket outcome."""

from dataclasses import dataclass, field

from facility_router.domain.value_objects.enums import AssignmentStatus, SkillGroup


@dataclass(frozen=True)
class AssignableTicket:
    ticket_id: str
    property_id: str
    skill_group: SkillGroup | None  # None → general pool


@dataclass(frozen=True)
class AssignmentDecision:
    ticket_id: str
    assigned_worker_id: str | None
    status: AssignmentStatus
    error: str | None = None


@dataclass
class AssignmentSummary:
    results: list[AssignmentDecision] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def assigned(self) -> int:
        return sum(1 for r in self.results if r.status == AssignmentStatus.ASSIGNED)

    @property
    def waitlisted(self) -> int:
        return sum(1 for r in self.results if r.status == AssignmentStatus.WAITLISTED)

    @property
    def errors(self) -> int:
        return sum(1 for r in self.results if r.status == AssignmentStatus.ERROR)
