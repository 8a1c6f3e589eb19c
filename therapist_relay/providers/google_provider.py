"""Google Gemini provider implementation."""

from __future__ import annotations

from typing import Any

from therapist_relay.core.errors import EmptyResponseError
from therapist_relay.core.prompts import PayloadShape
from therapist_relay.providers.base import BaseProvider


DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"

SAFETY_CATEGORIES = (
    "HARM_CATEGORY_HARASSMENT",
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
    "HARM_CATEGORY_DANGEROUS_CONTENT",
)


def _build_generate_url(base_url: str | None, model_id: str) -> str:
    """Build the Gemini generateContent endpoint URL."""

    resolved_base = (base_url or DEFAULT_BASE_URL).rstrip("/")
    if not resolved_base.endswith(("/v1beta", "/v1")):
        resolved_base = f"{resolved_base}/v1beta"
    return f"{resolved_base}/models/{model_id}:generateContent"


def _extract_text(payload: dict[str, Any]) -> str:
    """Join the text parts of the first Gemini candidate."""

    candidates = payload.get("candidates")
    if not isinstance(candidates, list) or not candidates or not isinstance(candidates[0], dict):
        return ""
    content = candidates[0].get("content")
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list):
        return ""
    texts = [
        part["text"] for part in parts if isinstance(part, dict) and isinstance(part.get("text"), str)
    ]
    return "".join(texts)


class GoogleProvider(BaseProvider):
    """Provider for the Gemini generateContent API.

    Gemini receives one composed prompt; the persona and transcript travel
    inside the text rather than as separate role entries.
    """

    payload_shape = PayloadShape.COMPOSED

    def endpoint_url(self) -> str:
        return _build_generate_url(self.config.base_url, self.config.model)

    def build_body(self, payload: str | list[dict[str, str]]) -> dict[str, Any]:
        """Wrap the composed prompt in a generateContent request."""

        generation_config: dict[str, Any] = {
            "temperature": self.config.temperature,
            "topK": 40,
            "topP": 0.95,
            "maxOutputTokens": self.config.max_tokens or 1024,
            "stopSequences": [],
        }
        return {
            "contents": [{"parts": [{"text": str(payload)}]}],
            "generationConfig": generation_config,
            "safetySettings": [
                {"category": category, "threshold": "BLOCK_MEDIUM_AND_ABOVE"}
                for category in SAFETY_CATEGORIES
            ],
        }

    def extract_reply(self, data: dict[str, Any]) -> str:
        content = _extract_text(data)
        if content.strip():
            return content
        feedback = data.get("promptFeedback")
        block_reason = feedback.get("blockReason") if isinstance(feedback, dict) else None
        if block_reason:
            raise EmptyResponseError(f"No response generated (blocked: {block_reason})")
        raise EmptyResponseError("No response generated")
