"""Port interface for the external reasoning (LLM) classification service."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from facility_router.domain.entities.classification import LLMJudgment


class GatewayError(Exception):
    """Base class for every reasoning-service failure. Never fatal to callers."""


class GatewayUnavailableError(GatewayError):
    """The gateway is not configured (no key / URL, SDK missing)."""


class GatewayTimeoutError(GatewayError):
    """The call did not complete within the configured timeout."""


class GatewayTransportError(GatewayError):
    """Network failure or non-2xx response."""


class GatewayResponseError(GatewayError):
    """The response was not valid JSON or did not match the schema."""


class UnknownSkillGroupError(GatewayResponseError):
    """The service answered with a category outside the known skill groups."""


@dataclass(frozen=True)
class ReasoningRequest:
    """Wire request: ``{ticket_text, candidate_buckets, rule_scores}``."""

    ticket_text: str
    candidate_buckets: list[str]
    rule_scores: dict[str, int] = field(default_factory=dict)

    def to_payload(self) -> dict:
        return {
            "ticket_text": self.ticket_text,
            "candidate_buckets": list(self.candidate_buckets),
            "rule_scores": dict(self.rule_scores),
        }


class ReasoningGateway(ABC):
    @abstractmethod
    async def classify(self, request: ReasoningRequest) -> LLMJudgment:
        """Ask the reasoning service for a judgment.

        Raises:
            GatewayError: on any failure; implementations must not coerce an
                unknown primary category into a known one.
        """
        ...
