"""Chat and health API routes."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends

from therapist_relay.api.converters import to_chat_request, to_chat_response_body
from therapist_relay.api.schemas import ChatRequestBody, ChatResponseBody
from therapist_relay.config.settings import load_settings
from therapist_relay.core.errors import ValidationError
from therapist_relay.core.relay import RelayService
from therapist_relay.providers.registry import get_provider_registry


router = APIRouter(prefix="/api", tags=["chat"])


def get_relay_service() -> RelayService:
    """Return a relay service bound to the active provider."""

    settings = load_settings()
    provider = get_provider_registry().active
    return RelayService(provider, filter_thoughts=settings.thought_filter_enabled)


@router.post("/chat", response_model=ChatResponseBody)
async def chat(
    payload: ChatRequestBody, service: RelayService = Depends(get_relay_service)
) -> ChatResponseBody:
    """Relay one chat turn to the active provider."""

    if payload.message is None:
        raise ValidationError("Message is required")
    response = await service.handle(to_chat_request(payload))
    return to_chat_response_body(response)


@router.get("/health")
async def health_check() -> dict[str, Any]:
    """Return service health and whether the provider credential is present."""

    config = get_provider_registry().active.config
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "provider": config.id,
        "model": config.model,
        f"{config.id}Configured": config.has_api_key,
    }
