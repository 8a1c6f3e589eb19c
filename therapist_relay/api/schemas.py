"""Pydantic request and response schemas for the relay API."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ProviderConfig(BaseModel):
    """Provider configuration loaded from YAML; read-only after startup."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Provider identifier, e.g. gemini.")
    name: str = Field(..., description="Provider display name.")
    type: str = Field(..., description="Adapter type: google or openai.")
    auth_scheme: Literal["query-param", "bearer-header"] = Field(
        default="bearer-header", description="How the API key is sent."
    )
    api_key: str | None = Field(default=None, description="API key for provider.")
    base_url: str | None = Field(default=None, description="Custom base URL.")
    model: str = Field(..., description="Model identifier sent upstream.")
    temperature: float = Field(default=0.7)
    max_tokens: int | None = Field(default=None)

    @property
    def has_api_key(self) -> bool:
        """Return True when a usable credential is present."""

        return bool(self.api_key and self.api_key.strip())


class HistoryItem(BaseModel):
    """One prior turn as sent by the browser widget."""

    content: str = Field(..., description="Message text.")
    type: str = Field(default="user", description="'user' or 'ai'/'assistant'.")
    timestamp: str | None = Field(default=None, description="Client display time.")


class ChatRequestBody(BaseModel):
    """Payload for submitting a chat turn."""

    message: str | None = Field(default=None, description="New user message.")
    history: list[HistoryItem] = Field(default_factory=list)


class ChatResponseBody(BaseModel):
    """Successful chat reply."""

    response: str = Field(..., description="Normalized reply text.")
    timestamp: datetime = Field(..., description="Server timestamp.")


class ErrorResponse(BaseModel):
    """Structured error body returned for every failure."""

    error: str
    details: str | None = None
