"""Domain enums — pure Python, no external dependencies."""

from enum import Enum


class SkillGroup(str, Enum):
    TECHNICAL = "technical"
    PLUMBING = "plumbing"
    VENDOR = "vendor"
    SOFT_SERVICE = "soft_service"


class Confidence(str, Enum):
    HIGH = "high"
    LOW = "low"


class Zone(str, Enum):
    A_CONFIDENT = "A_confident"
    B_AMBIGUOUS = "B_ambiguous"
    C_ANOMALOUS = "C_anomalous"


class DecisionSource(str, Enum):
    RULE = "rule"
    LLM = "llm"
    HUMAN = "human"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class AssignmentStatus(str, Enum):
    ASSIGNED = "assigned"
    WAITLISTED = "waitlisted"
    ERROR = "error"


class TicketStatus(str, Enum):
    OPEN = "open"
    WAITLIST = "waitlist"
    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    PAUSED = "paused"
    RESOLVED = "resolved"
    CLOSED = "closed"


# Statuses the bulk-assign flow is allowed to pick up
AWAITING_ASSIGNMENT = frozenset({TicketStatus.OPEN, TicketStatus.WAITLIST})
