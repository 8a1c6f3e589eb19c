"""Conversion helpers between API schemas and relay types."""

from __future__ import annotations

from datetime import datetime, timezone

from therapist_relay.api.schemas import ChatRequestBody, ChatResponseBody, HistoryItem
from therapist_relay.core.context import ChatRequest, ChatResponse, ConversationContext, Turn


def _parse_timestamp(value: str | None, received_at: datetime) -> datetime:
    """Parse an ISO-8601 timestamp, falling back to the receipt time."""

    if not value:
        return received_at
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        # the widget sends display times such as "14:05"
        return received_at
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def to_turn(item: HistoryItem, received_at: datetime) -> Turn:
    """Convert a browser history item to a turn."""

    role = "user" if item.type.strip().lower() == "user" else "assistant"
    return Turn(
        content=item.content,
        role=role,
        timestamp=_parse_timestamp(item.timestamp, received_at),
    )


def to_chat_request(body: ChatRequestBody) -> ChatRequest:
    """Convert the request body to a relay chat request."""

    received_at = datetime.now(timezone.utc)
    history = ConversationContext.from_turns(
        [to_turn(item, received_at) for item in body.history]
    )
    return ChatRequest(message=body.message or "", history=history)


def to_chat_response_body(response: ChatResponse) -> ChatResponseBody:
    """Convert a relay reply to the response body."""

    return ChatResponseBody(response=response.reply, timestamp=response.timestamp)
