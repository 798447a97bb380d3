"""Port interface for the fire-and-forget decision log / event channel."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Union

from facility_router.domain.entities.classification import ResolvedClassification


@dataclass(frozen=True)
class DecisionEvent:
    """A notable step of a classification (``llm.invoked``, ``ticket.categorized`` ...)."""

    name: str
    ticket_id: str | None
    payload: dict[str, Any] = field(default_factory=dict)
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True)
class DecisionRecord:
    """Audit record: one resolved classification bound to a ticket."""

    ticket_id: str
    resolution: ResolvedClassification
    actor: str | None = None
    recorded_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


DecisionItem = Union[DecisionEvent, DecisionRecord]


class DecisionLogger(ABC):
    @abstractmethod
    def submit(self, item: DecisionItem) -> None:
        """Hand an item to the log channel without waiting for delivery.

        Must never raise and never block the caller.
        """
        ...


class DecisionSink(ABC):
    """Destination the background log worker delivers items to."""

    @abstractmethod
    async def write(self, item: DecisionItem) -> None:
        ...
