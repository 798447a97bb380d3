"""WorkerSkillEntry — one (worker, skill group) row of a property's resolver pool."""

from dataclasses import dataclass
from datetime import datetime

from facility_router.domain.value_objects.enums import SkillGroup


@dataclass
class WorkerSkillEntry:
    worker_id: str
    property_id: str
    skill_group: SkillGroup
    is_available: bool = True
    is_checked_in: bool = False
    last_assigned_at: datetime | None = None

    def has_skill(self, skill_group: SkillGroup | None) -> bool:
        return skill_group is not None and self.skill_group == skill_group
