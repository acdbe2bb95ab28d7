"""Bot reply orchestration for one incoming chat message.

Order of precedence for a user message:

1. Rate limiting (admins are counted but never blocked)
2. Profanity masking; blank messages get no reply
3. "yes" right after an admin offer escalates to a human
4. Small-talk intents (greetings, thanks, goodbye, help)
5. Knowledge base match, with a join hint or admin offer for weak replies
6. Admin offer when no knowledge base is loaded

Persistence of messages and chats stays with the caller.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
import logging
import re
from typing import Any

from kb_matcher.config import Settings, get_settings
from kb_matcher.domain.model import Document
from kb_matcher.observability.context import message_trace
from kb_matcher.observability.metrics import CHAT_REPLY_COUNT, RATE_LIMITED_COUNT
from kb_matcher.search.formatter import format_response
from kb_matcher.search.matcher import KnowledgeBaseMatcher
from kb_matcher.services.intents import (
    admin_confirm_message,
    admin_offer_message,
    detect_language,
    error_message,
    join_hint_message,
    match_intent,
)
from kb_matcher.services.moderation import filter_profanity
from kb_matcher.services.rate_limit import (
    InMemoryRateLimitStore,
    RateLimitDecision,
    RateLimiter,
    RateLimitExceededError,
)


logger = logging.getLogger(__name__)

MIN_REPLY_LENGTH = 10

_AFFIRMATIVE_PATTERN = re.compile(r"^(yes|y|haan|han|جی|ہاں)$", re.IGNORECASE)
_JOIN_PATTERN = re.compile(r"apply|join", re.IGNORECASE)


@dataclass(frozen=True)
class ChatReply:
    """Bot message to be stored by the caller."""

    text: str
    match_type: str
    meta: dict[str, Any] = field(default_factory=dict)

    @property
    def needs_admin(self) -> bool:
        return bool(self.meta.get("needs_admin"))


class ChatResponder:
    """Answers user messages from a knowledge base snapshot."""

    def __init__(
        self,
        documents: Iterable[Document] = (),
        *,
        settings: Settings | None = None,
        matcher: KnowledgeBaseMatcher | None = None,
        rate_limiter: RateLimiter | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.matcher = matcher or KnowledgeBaseMatcher.from_settings(self.settings)
        self.rate_limiter = rate_limiter or RateLimiter(
            InMemoryRateLimitStore(),
            window_ms=self.settings.rate_limit_window_ms,
            max_count=self.settings.rate_limit_max_messages,
        )
        self._documents: tuple[Document, ...] = tuple(documents)

    @property
    def documents(self) -> tuple[Document, ...]:
        return self._documents

    def replace_documents(self, documents: Iterable[Document]) -> None:
        """Swap in a refreshed knowledge base snapshot."""
        self._documents = tuple(documents)
        logger.info("Knowledge base loaded", extra={"documents": len(self._documents)})

    def respond(
        self,
        user_id: str,
        text: str,
        *,
        is_admin: bool = False,
        takeover: bool = False,
        chat_id: str | None = None,
        previous_bot_meta: Mapping[str, Any] | None = None,
    ) -> ChatReply | None:
        """Build the bot reply for ``text``, or None when the bot stays silent.

        Args:
            user_id: Identity used for rate limiting.
            text: Raw message text.
            is_admin: Admin messages are never answered by the bot.
            takeover: True while an admin has taken over the conversation.
            chat_id: Conversation id logged as ``session`` for this message.
            previous_bot_meta: Meta of the last bot reply in this chat.

        Raises:
            RateLimitExceededError: A non-admin user exceeded the limit.
        """
        with message_trace(session=chat_id):
            return self._respond(
                user_id,
                text,
                is_admin=is_admin,
                takeover=takeover,
                previous_bot_meta=previous_bot_meta,
            )

    def _respond(
        self,
        user_id: str,
        text: str,
        *,
        is_admin: bool,
        takeover: bool,
        previous_bot_meta: Mapping[str, Any] | None,
    ) -> ChatReply | None:
        decision = self.rate_limiter.check(user_id)
        if not decision.allowed and not is_admin:
            RATE_LIMITED_COUNT.labels(scope="user").inc()
            logger.warning("Chat message rate limited", extra={"limit": decision.limit})
            raise RateLimitExceededError(decision)

        filtered = filter_profanity(text or "").strip()
        if not filtered or is_admin or takeover:
            return None

        lang = detect_language(filtered)
        if previous_bot_meta and previous_bot_meta.get("needs_admin_offer") and _AFFIRMATIVE_PATTERN.match(filtered):
            reply = ChatReply(
                text=admin_confirm_message(lang),
                match_type="escalated",
                meta={"needs_admin": True, "escalated": True},
            )
        else:
            reply = self._answer(filtered, lang)

        return self._finish(reply, decision)

    def _answer(self, text: str, lang: str) -> ChatReply:
        intent = match_intent(text)
        if intent.handled and intent.reply:
            return ChatReply(text=intent.reply, match_type="intent", meta={"intent": intent.intent_id})

        if not self._documents:
            return ChatReply(
                text=admin_offer_message(lang),
                match_type="none",
                meta={"needs_admin_offer": True},
            )

        try:
            return self._answer_from_knowledge_base(text, lang)
        except Exception:
            logger.exception("Knowledge base reply failed")
            return ChatReply(
                text=error_message(lang),
                match_type="error",
                meta={"needs_admin": True, "error": True},
            )

    def _answer_from_knowledge_base(self, text: str, lang: str) -> ChatReply:
        match = self.matcher.find_best_match(text, self._documents, self.settings.chat_match_threshold)
        response = format_response(match)
        reply_text = response.text.strip()

        if len(reply_text) < MIN_REPLY_LENGTH:
            fallback = join_hint_message(lang) if _JOIN_PATTERN.search(text) else admin_offer_message(lang)
            return ChatReply(text=fallback, match_type="fallback", meta={"needs_admin_offer": True})

        return ChatReply(
            text=reply_text,
            match_type="intelligent",
            meta={
                "source_url": response.source_url,
                "source_page": response.source_page,
                "confidence": response.confidence,
                "needs_admin": response.needs_admin,
            },
        )

    def _finish(self, reply: ChatReply, decision: RateLimitDecision) -> ChatReply:
        CHAT_REPLY_COUNT.labels(match_type=reply.match_type).inc()
        if reply.needs_admin:
            logger.info("Chat query routed to admin", extra={"match_type": reply.match_type})
        meta = {**reply.meta, "match_type": reply.match_type, "rate": decision.to_meta()}
        return ChatReply(text=reply.text, match_type=reply.match_type, meta=meta)
