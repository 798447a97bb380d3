"""Port interface for ticket persistence."""

from abc import ABC, abstractmethod

from facility_router.domain.entities.classification import ResolvedClassification
from facility_router.domain.entities.ticket import Ticket


class TicketRepository(ABC):
    @abstractmethod
    async def get_by_id(self, ticket_id: str) -> Ticket | None:
        ...

    @abstractmethod
    async def get_many(self, ticket_ids: list[str]) -> list[Ticket]:
        ...

    @abstractmethod
    async def save_classification(
        self, ticket_id: str, resolution: ResolvedClassification
    ) -> None:
        """Store the decision's skill group, issue code and metadata on the ticket."""
        ...
