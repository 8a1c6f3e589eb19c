"""OpenAI-compatible provider implementation."""

from __future__ import annotations

from typing import Any

from therapist_relay.core.errors import EmptyResponseError
from therapist_relay.core.prompts import PayloadShape
from therapist_relay.providers.base import BaseProvider


DEFAULT_BASE_URL = "https://api.openai.com"


def _build_chat_completions_url(base_url: str | None) -> str:
    """Build the chat completions endpoint URL from a base URL."""

    resolved_base = (base_url or DEFAULT_BASE_URL).rstrip("/")
    if resolved_base.endswith("/chat/completions"):
        return resolved_base
    if resolved_base.endswith("/v1"):
        return f"{resolved_base}/chat/completions"
    return f"{resolved_base}/v1/chat/completions"


class OpenAIProvider(BaseProvider):
    """Provider for OpenAI-compatible chat completions APIs."""

    payload_shape = PayloadShape.MESSAGES

    def endpoint_url(self) -> str:
        return _build_chat_completions_url(self.config.base_url)

    def build_body(self, payload: str | list[dict[str, str]]) -> dict[str, Any]:
        """Build a chat completions body from role-tagged messages."""

        if isinstance(payload, str):
            payload = [{"role": "user", "content": payload}]
        body: dict[str, Any] = {
            "model": self.config.model,
            "messages": payload,
            "temperature": self.config.temperature,
        }
        if self.config.max_tokens is not None:
            body["max_tokens"] = self.config.max_tokens
        return body

    def extract_reply(self, data: dict[str, Any]) -> str:
        choices = data.get("choices")
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            raise EmptyResponseError("No response generated")
        message = choices[0].get("message")
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str) or not content.strip():
            raise EmptyResponseError("No response generated")
        return content
