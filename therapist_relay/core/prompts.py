"""Prompt assembly for provider calls."""

from __future__ import annotations

from enum import Enum

from therapist_relay.core.context import HISTORY_WINDOW, ConversationContext, Turn


PERSONA_INSTRUCTION = """You are a compassionate, professional AI therapist. Your role is to:
- Listen actively and provide empathetic responses
- Ask thoughtful, open-ended questions to help users explore their feelings
- Provide gentle guidance and evidence-based coping strategies
- Maintain a warm, non-judgmental, and supportive tone
- Keep responses concise but meaningful (2-4 sentences)
- Recognize when professional help may be needed and suggest it appropriately"""

CLOSING_INSTRUCTION = (
    "Please respond as a skilled therapist would, "
    "focusing on the user's emotional wellbeing:"
)

_SPEAKER_LABELS = {"user": "User", "assistant": "Therapist"}


class PayloadShape(str, Enum):
    """Request payload shapes understood by providers."""

    COMPOSED = "composed"
    MESSAGES = "messages"


def render_transcript(turns: tuple[Turn, ...]) -> str:
    """Render turns as ``User: ...`` / ``Therapist: ...`` lines."""

    return "\n".join(f"{_SPEAKER_LABELS[turn.role]}: {turn.content}" for turn in turns)


def build_composed_prompt(message: str, history: ConversationContext) -> str:
    """Compose the persona, recent transcript and new message into one prompt."""

    transcript = render_transcript(history.recent(HISTORY_WINDOW))
    context_block = f"Previous conversation context:\n{transcript}\n\n" if transcript else ""
    return (
        f"{PERSONA_INSTRUCTION}\n\n"
        f"{context_block}"
        f'User\'s current message: "{message}"\n\n'
        f"{CLOSING_INSTRUCTION}"
    )


def build_role_messages(message: str, history: ConversationContext) -> list[dict[str, str]]:
    """Build a system/user/assistant message list for chat-style APIs."""

    messages: list[dict[str, str]] = [{"role": "system", "content": PERSONA_INSTRUCTION}]
    for turn in history.recent(HISTORY_WINDOW):
        messages.append({"role": turn.role, "content": turn.content})
    messages.append({"role": "user", "content": message})
    return messages


def build_payload(
    message: str, history: ConversationContext, shape: PayloadShape
) -> str | list[dict[str, str]]:
    """Build the payload shape a provider consumes."""

    if shape is PayloadShape.COMPOSED:
        return build_composed_prompt(message, history)
    return build_role_messages(message, history)
