"""Reply cleanup applied before a provider reply reaches the client."""

from __future__ import annotations

import re


THOUGHT_TAGS = ("think", "thinking", "reasoning", "thought")

_TAG_PATTERN = re.compile(
    r"<(?P<tag>{tags})>.*?</(?P=tag)>".format(tags="|".join(THOUGHT_TAGS)),
    re.IGNORECASE | re.DOTALL,
)
_DANGLING_TAG_PATTERN = re.compile(
    r"</?(?:{tags})>".format(tags="|".join(THOUGHT_TAGS)),
    re.IGNORECASE,
)


def strip_thoughts(text: str) -> str:
    """Remove reasoning blocks some chat models prepend to their answer."""

    if not text:
        return text
    cleaned = _TAG_PATTERN.sub("", text)
    return _DANGLING_TAG_PATTERN.sub("", cleaned)


def clean_reply(text: str | None, *, filter_thoughts: bool = True) -> str:
    """Return the reply text ready for the client, possibly empty."""

    if not text:
        return ""
    if filter_thoughts:
        text = strip_thoughts(text)
    return text.strip()
