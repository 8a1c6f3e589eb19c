"""Relay service: one chat turn in, one normalized reply out."""

from __future__ import annotations

import logging

import httpx

from therapist_relay.core.context import ChatRequest, ChatResponse
from therapist_relay.core.errors import (
    ConfigError,
    EmptyResponseError,
    ProviderError,
    RelayError,
    TransportError,
    ValidationError,
)
from therapist_relay.core.filters import clean_reply
from therapist_relay.core.prompts import build_payload
from therapist_relay.providers.base import BaseProvider


logger = logging.getLogger(__name__)


class RelayService:
    """Orchestrates validation, prompt assembly and the provider call.

    The service performs exactly one provider call per request and never
    retries; retrying is left to the client.
    """

    def __init__(self, provider: BaseProvider, *, filter_thoughts: bool = True) -> None:
        self._provider = provider
        self._filter_thoughts = filter_thoughts

    @property
    def provider(self) -> BaseProvider:
        """Return the active provider adapter."""

        return self._provider

    async def handle(self, request: ChatRequest) -> ChatResponse:
        """Relay a chat turn and return the normalized reply."""

        message = request.message.strip() if request.message else ""
        if not message:
            raise ValidationError("Message is required")
        config = self._provider.config
        if not config.has_api_key:
            raise ConfigError(f"{config.name} API key not configured")

        payload = build_payload(request.message, request.history, self._provider.payload_shape)
        outbound = self._provider.build_request(payload)
        try:
            raw_reply = await self._provider.call_and_parse(outbound)
        except RelayError:
            raise
        except httpx.HTTPError as exc:
            logger.error("Could not reach %s: %s", config.name, type(exc).__name__)
            raise TransportError(f"Could not reach {config.name}") from exc
        except Exception as exc:  # noqa: BLE001 - every adapter fault becomes a RelayError
            logger.exception("Unexpected %s adapter failure", config.name)
            raise ProviderError(f"{config.name} API Error: unexpected response") from exc

        reply = clean_reply(raw_reply, filter_thoughts=self._filter_thoughts)
        if not reply:
            raise EmptyResponseError("No response generated")
        return ChatResponse(reply=reply)
