"""Pick the reasoning gateway implementation from settings."""

from __future__ import annotations

import logging

from facility_router.adapters.llm.http_gateway import HttpReasoningGateway, NullReasoningGateway
from facility_router.adapters.llm.openai_gateway import OpenAIReasoningGateway
from facility_router.application.ports.reasoning_gateway import ReasoningGateway
from facility_router.config import Settings

logger = logging.getLogger(__name__)


def build_gateway(settings: Settings) -> ReasoningGateway:
    provider = (settings.reasoning_provider or "").strip().lower()
    if provider == "openai":
        logger.info("Using OpenAI reasoning gateway (model=%s)", settings.openai_model)
        return OpenAIReasoningGateway(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            base_url=settings.openai_base_url,
            timeout=settings.reasoning_timeout_seconds,
        )
    if provider == "http":
        logger.info("Using HTTP reasoning gateway at %s", settings.reasoning_service_url)
        return HttpReasoningGateway(
            url=settings.reasoning_service_url,
            token=settings.reasoning_service_token,
            timeout=settings.reasoning_timeout_seconds,
        )
    if provider not in ("", "none"):
        raise ValueError(f"Unknown REASONING_PROVIDER: {settings.reasoning_provider!r}")
    logger.info("Reasoning gateway disabled, rules only")
    return NullReasoningGateway()
