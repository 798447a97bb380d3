"""HTTP gateway — implements ReasoningGateway against a JSON classification service."""

from __future__ import annotations

import logging
import time

import httpx

from facility_router.adapters.llm.schema import parse_judgment
from facility_router.application.ports.reasoning_gateway import (
    GatewayTimeoutError,
    GatewayTransportError,
    GatewayUnavailableError,
    ReasoningGateway,
    ReasoningRequest,
)
from facility_router.config import settings
from facility_router.domain.entities.classification import LLMJudgment

logger = logging.getLogger(__name__)


class HttpReasoningGateway(ReasoningGateway):
    """POSTs ``{ticket_text, candidate_buckets, rule_scores}`` and validates the reply."""

    def __init__(
        self,
        url: str | None = None,
        token: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._url = url if url is not None else settings.reasoning_service_url
        self._token = token if token is not None else settings.reasoning_service_token
        self._timeout = timeout or settings.reasoning_timeout_seconds
        self._transport = transport

    async def classify(self, request: ReasoningRequest) -> LLMJudgment:
        if not self._url:
            raise GatewayUnavailableError("REASONING_SERVICE_URL is not set")

        headers = {"Accept": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"

        started = time.perf_counter()
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
                response = await client.post(self._url, json=request.to_payload(), headers=headers)
                response.raise_for_status()
        except httpx.TimeoutException as e:
            raise GatewayTimeoutError(f"Reasoning service timed out after {self._timeout:.1f}s") from e
        except httpx.HTTPStatusError as e:
            raise GatewayTransportError(
                f"Reasoning service returned HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise GatewayTransportError(f"Reasoning service unreachable: {e}") from e

        latency_ms = int((time.perf_counter() - started) * 1000)
        logger.debug("Reasoning service answered in %d ms", latency_ms)
        return parse_judgment(response.content, latency_ms)


class NullReasoningGateway(ReasoningGateway):
    """Used when REASONING_PROVIDER=none: every escalation falls back to rules."""

    async def classify(self, request: ReasoningRequest) -> LLMJudgment:
        raise GatewayUnavailableError("Reasoning service disabled (REASONING_PROVIDER=none)")
