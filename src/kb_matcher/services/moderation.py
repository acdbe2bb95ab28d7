"""Message hygiene helpers applied before a chat message is answered."""

from __future__ import annotations

from collections.abc import Iterable
import re


PROFANITY_WORDS: tuple[str, ...] = ("damn", "hell", "crap", "stupid", "idiot", "dumb")

CHAT_TITLE_LENGTH = 50


def _build_profanity_pattern(words: Iterable[str]) -> re.Pattern[str]:
    alternatives = "|".join(re.escape(word) for word in words)
    return re.compile(rf"\b(?:{alternatives})\b", re.IGNORECASE)


_PROFANITY_PATTERN = _build_profanity_pattern(PROFANITY_WORDS)


def filter_profanity(text: str, words: Iterable[str] | None = None) -> str:
    """Mask whole-word profanity with asterisks of the same length.

    >>> filter_profanity("That was a stupid idea")
    'That was a ****** idea'
    """
    pattern = _PROFANITY_PATTERN if words is None else _build_profanity_pattern(words)
    return pattern.sub(lambda match: "*" * len(match.group(0)), text)


def generate_chat_title(first_message: str, max_length: int = CHAT_TITLE_LENGTH) -> str:
    """Title a conversation after its first message, cut at ``max_length``."""
    truncated = first_message[:max_length]
    return f"{truncated}..." if len(truncated) < len(first_message) else truncated
