"""Conversation turns and the history window passed with each chat turn."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal, Sequence


HISTORY_WINDOW = 5

Role = Literal["user", "assistant"]


def _utc_now() -> datetime:
    """Return the current UTC time."""

    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Turn:
    """One message exchanged in the conversation."""

    content: str
    role: Role
    timestamp: datetime = field(default_factory=_utc_now)


@dataclass(frozen=True)
class ConversationContext:
    """Chronologically ordered turns owned by the caller."""

    turns: tuple[Turn, ...] = ()

    @classmethod
    def from_turns(cls, turns: Sequence[Turn]) -> ConversationContext:
        """Freeze a sequence of turns into a context."""

        return cls(turns=tuple(turns))

    def recent(self, limit: int = HISTORY_WINDOW) -> tuple[Turn, ...]:
        """Return the most recent turns, oldest first."""

        if limit <= 0:
            return ()
        return self.turns[-limit:]

    def __len__(self) -> int:
        return len(self.turns)


@dataclass(frozen=True)
class ChatRequest:
    """A new user message together with its recent history."""

    message: str
    history: ConversationContext = field(default_factory=ConversationContext)


@dataclass(frozen=True)
class ChatResponse:
    """Normalized reply returned for every provider."""

    reply: str
    timestamp: datetime = field(default_factory=_utc_now)
