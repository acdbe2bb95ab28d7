"""Chat-facing services built on top of the matching engine."""

from kb_matcher.services.chat_responder import ChatReply, ChatResponder
from kb_matcher.services.intents import IntentMatch, detect_language, match_intent
from kb_matcher.services.moderation import filter_profanity, generate_chat_title
from kb_matcher.services.rate_limit import (
    InMemoryRateLimitStore,
    RateLimitDecision,
    RateLimiter,
    RateLimitExceededError,
    RateLimitStore,
)


__all__ = [
    "ChatReply",
    "ChatResponder",
    "InMemoryRateLimitStore",
    "IntentMatch",
    "RateLimitDecision",
    "RateLimitExceededError",
    "RateLimitStore",
    "RateLimiter",
    "detect_language",
    "filter_profanity",
    "generate_chat_title",
    "match_intent",
]
