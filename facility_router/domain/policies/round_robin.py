"""RoundRobinPolicy — least-recently-assigned worker selection over the skill index."""

from __future__ import annotations

from datetime import datetime

from facility_router.domain.entities.worker import WorkerSkillEntry
from facility_router.domain.value_objects.enums import SkillGroup


def candidate_pool(
    skill_index: list[WorkerSkillEntry],
    skill_group: SkillGroup | None,
) -> tuple[list[WorkerSkillEntry], bool]:
    """Select the eligible entries for a ticket.

    1. Available entries of the ticket's skill group.
    2. If none, the general pool: every available worker, one entry each.
    3. If any entry in the pool is checked in, keep only checked-in ones.

    Returns:
        (pool, general_fallback_used)
    """
    available = [e for e in skill_index if e.is_available]

    pool = [e for e in available if e.has_skill(skill_group)]
    general = not pool
    if general:
        pool = _one_per_worker(available)
        checked_in_workers = {e.worker_id for e in available if e.is_checked_in}
        on_shift = [e for e in pool if e.worker_id in checked_in_workers]
    else:
        on_shift = [e for e in pool if e.is_checked_in]

    if on_shift:
        pool = on_shift
    return pool, general


def pick_least_recent(pool: list[WorkerSkillEntry]) -> WorkerSkillEntry:
    """Oldest ``last_assigned_at`` first; never-assigned workers beat everyone.

    Ties are broken by worker id so the pick is deterministic.

    Raises:
        ValueError: if the pool is empty.
    """
    if not pool:
        raise ValueError("Cannot pick from an empty worker pool")
    return min(pool, key=_recency_key)


def _recency_key(entry: WorkerSkillEntry) -> tuple[bool, datetime | float, str]:
    if entry.last_assigned_at is None:
        return (False, 0.0, entry.worker_id)
    return (True, entry.last_assigned_at, entry.worker_id)


def _one_per_worker(entries: list[WorkerSkillEntry]) -> list[WorkerSkillEntry]:
    """Collapse a worker's skill rows to the one assigned most recently."""
    by_worker: dict[str, WorkerSkillEntry] = {}
    for entry in entries:
        current = by_worker.get(entry.worker_id)
        if current is None or _recency_key(entry) > _recency_key(current):
            by_worker[entry.worker_id] = entry
    return list(by_worker.values())
