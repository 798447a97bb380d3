"""Port interface for the resolver pool (skill index) persistence."""

from abc import ABC, abstractmethod

from facility_router.domain.entities.worker import WorkerSkillEntry


class WorkerSkillRepository(ABC):
    @abstractmethod
    async def get_skill_index(self, property_id: str) -> list[WorkerSkillEntry]:
        """Return every (worker, skill group) row of the property.

        Implementations backed by a shared store must lock the rows for the
        rest of the current transaction (SELECT ... FOR UPDATE) so that two
        concurrent batches cannot both claim the same idle worker.
        """
        ...
