"""OpenAI gateway — implements ReasoningGateway with an OpenAI-compatible chat API."""

from __future__ import annotations

import json
import logging
import time

import openai
from openai import AsyncOpenAI

from facility_router.adapters.llm.schema import parse_judgment
from facility_router.application.ports.reasoning_gateway import (
    GatewayResponseError,
    GatewayTimeoutError,
    GatewayTransportError,
    GatewayUnavailableError,
    ReasoningGateway,
    ReasoningRequest,
)
from facility_router.config import settings
from facility_router.domain.entities.classification import LLMJudgment, TokenUsage

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """\
You are a facility-management helpdesk dispatcher for commercial buildings.

You receive a JSON object with:
  - "ticket_text": the tenant's complaint,
  - "candidate_buckets": the skill groups the keyword rules consider likely,
  - "rule_scores": raw keyword scores per skill group and issue code.

Return a JSON object with exactly these fields:

{
  "primary_category": one of ["technical", "plumbing", "vendor", "soft_service"],
  "secondary_category": one of the same values, or null,
  "priority": one of ["low", "medium", "high", "critical"],
  "risk_flag": short label for a safety / compliance risk (e.g. "fire_hazard", "electrical_shock", "water_damage"), or null,
  "reasoning": one or two sentences explaining the choice
}

Skill groups:
  technical    — electrical, air conditioning, lighting, network, doors, civil repairs.
  plumbing     — leaks, drains, taps, toilets and other water fixtures.
  vendor       — lifts, fire systems, CCTV, access control, central HVAC, BMS (AMC-managed equipment).
  soft_service — cleaning, pantry, pests, waste, washroom hygiene.

Rules:
- Prefer a candidate bucket unless the text clearly describes another group.
- Keyword scores are hints; judge the situation described, not isolated words.
- Ignore locations (floor numbers, wings, room names) when choosing the category.
- Anything involving sparks, smoke, gas, flooding or people trapped is "critical".
- Return ONLY valid JSON, no markdown or extra text."""


class OpenAIReasoningGateway(ReasoningGateway):
    """OpenAI (or OpenAI-compatible host) implementation of ReasoningGateway."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        max_attempts: int = 2,
        client: AsyncOpenAI | None = None,
    ):
        self._api_key = api_key if api_key is not None else settings.openai_api_key
        self._model = model or settings.openai_model
        self._timeout = timeout or settings.reasoning_timeout_seconds
        self._max_attempts = max_attempts
        self._client = client
        if self._client is None and self._has_key():
            self._client = AsyncOpenAI(
                api_key=self._api_key,
                base_url=base_url or settings.openai_base_url,
                timeout=self._timeout,
                max_retries=0,
            )

    def _has_key(self) -> bool:
        key = (self._api_key or "").strip()
        return bool(key) and "your-openai-api-key" not in key

    async def classify(self, request: ReasoningRequest) -> LLMJudgment:
        """Send the wire request as the user message and validate the JSON answer."""
        if self._client is None:
            raise GatewayUnavailableError("OPENAI_API_KEY is not set (or placeholder)")

        user_content = json.dumps(request.to_payload(), ensure_ascii=False)
        last_error: GatewayResponseError | None = None

        for attempt in range(1, self._max_attempts + 1):
            started = time.perf_counter()
            try:
                response = await self._client.chat.completions.create(
                    model=self._model,
                    messages=[
                        {"role": "system", "content": SYSTEM_PROMPT},
                        {"role": "user", "content": user_content},
                    ],
                    temperature=0.1,
                    response_format={"type": "json_object"},
                )
            except openai.APITimeoutError as e:
                raise GatewayTimeoutError(f"OpenAI call timed out after {self._timeout:.1f}s") from e
            except openai.APIStatusError as e:
                raise GatewayTransportError(f"OpenAI returned HTTP {e.status_code}") from e
            except openai.APIConnectionError as e:
                raise GatewayTransportError(f"OpenAI connection error: {e}") from e

            latency_ms = int((time.perf_counter() - started) * 1000)
            raw_text = response.choices[0].message.content or ""
            try:
                return parse_judgment(raw_text, latency_ms, _usage(response))
            except GatewayResponseError as e:
                logger.warning(
                    "Attempt %d/%d: invalid reasoning response: %s",
                    attempt, self._max_attempts, e,
                )
                last_error = e

        raise last_error or GatewayResponseError("No valid response from reasoning service")


def _usage(response) -> TokenUsage | None:
    usage = getattr(response, "usage", None)
    if usage is None:
        return None
    return TokenUsage(
        prompt_tokens=usage.prompt_tokens or 0,
        completion_tokens=usage.completion_tokens or 0,
        total_tokens=usage.total_tokens or 0,
    )
