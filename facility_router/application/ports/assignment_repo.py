"""Port interface for persisting assignment outcomes."""

from abc import ABC, abstractmethod
from datetime import datetime


class TicketNotAssignableError(RuntimeError):
    """The ticket left the open/waitlist states before the write landed."""


class AssignmentRepository(ABC):
    @abstractmethod
    async def record_assignment(
        self, ticket_id: str, worker_id: str, property_id: str, assigned_at: datetime
    ) -> None:
        """Mark the ticket assigned and advance the worker's last_assigned_at.

        Both writes succeed or fail together.

        Raises:
            TicketNotAssignableError: the ticket is no longer awaiting assignment.
        """
        ...

    @abstractmethod
    async def record_waitlist(self, ticket_id: str) -> None:
        """Raises:
            TicketNotAssignableError: the ticket is no longer awaiting assignment.
        """
        ...
