"""Tests for domain enums."""

from facility_router.domain.value_objects.enums import (
    AWAITING_ASSIGNMENT,
    AssignmentStatus,
    DecisionSource,
    SkillGroup,
    TicketStatus,
    Zone,
)


def test_skill_group_values():
    assert [g.value for g in SkillGroup] == ["technical", "plumbing", "vendor", "soft_service"]


def test_zone_values():
    assert Zone.A_CONFIDENT.value == "A_confident"
    assert Zone.B_AMBIGUOUS.value == "B_ambiguous"
    assert Zone.C_ANOMALOUS.value == "C_anomalous"


def test_decision_sources():
    assert {s.value for s in DecisionSource} == {"rule", "llm", "human"}


def test_assignment_status_values():
    assert AssignmentStatus.WAITLISTED.value == "waitlisted"


def test_awaiting_assignment_statuses():
    assert AWAITING_ASSIGNMENT == {TicketStatus.OPEN, TicketStatus.WAITLIST}
    assert TicketStatus.ASSIGNED not in AWAITING_ASSIGNMENT
