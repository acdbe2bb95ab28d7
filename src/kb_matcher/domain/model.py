"""Domain model - knowledge base pages and match results.

Pages arrive from an external ingestion process as loosely typed records.
They are validated and defaulted once at that boundary
(``Document.from_record``), so the matching core can rely on every field
being present and well typed:

- ``Document`` is an immutable value object (Pydantic dataclass, frozen)
- ``MatchResult`` is produced per match call and discarded afterwards
- ``FormattedResponse`` is the payload handed back to the chat layer
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass as std_dataclass
import hashlib
import re
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field
from pydantic.dataclasses import dataclass

from kb_matcher.search.analyzers import tokenize


_ID_UNSAFE_PATTERN = re.compile(r"[^a-z0-9]", re.IGNORECASE)


def _as_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    return ""


def _as_string_tuple(value: Any) -> tuple[str, ...] | None:
    """Return string items of a list-like value, or None when it is not list-like."""
    if value is None or isinstance(value, (str, bytes, Mapping)):
        return None
    if not isinstance(value, Iterable):
        return None
    return tuple(item for item in value if isinstance(item, str) and item)


def derive_document_id(
    url: str,
    title: str = "",
    content: str = "",
    tokens: Iterable[str] = (),
    position: int | None = None,
) -> str:
    """Build a stable identifier for a page that arrived without one.

    URL paths become slugs (``/about/team/`` -> ``about_team``) and the site
    root becomes ``home``. Pages without a URL get a short hash of their
    title, content, tokens and, when known, their position in the batch.
    """
    if url:
        slug = _ID_UNSAFE_PATTERN.sub("_", url.removeprefix("/").removesuffix("/")).lower()
        return slug or "home"
    parts = [title, content, " ".join(tokens), "" if position is None else str(position)]
    digest = hashlib.sha256("\n".join(parts).encode()).hexdigest()
    return f"page_{digest[:16]}"


@dataclass(frozen=True)
class Document:
    """A knowledge base page, read-only during a match call.

    ``tokens`` must be derived from the page text with
    :func:`kb_matcher.search.analyzers.tokenize`; the scorer never
    re-tokenizes pages.
    """

    id: str
    title: str = ""
    url: str = ""
    content: str = ""
    tokens: tuple[str, ...] = ()
    keywords: tuple[str, ...] = ()

    @property
    def display_name(self) -> str:
        """Title used for source attribution, falling back to the URL."""
        return self.title or self.url

    @classmethod
    def from_record(cls, record: Mapping[str, Any], *, position: int | None = None) -> Self:
        """Validate and default a loosely typed page record.

        Non-string text fields become empty strings. Missing or malformed
        ``tokens`` are computed from ``content``; an explicit empty list is
        kept, and such a page is skipped by the matcher. ``position`` is the
        record's index in its batch and keeps derived ids of otherwise
        identical records apart.
        """
        url = _as_text(record.get("url"))
        title = _as_text(record.get("title"))
        content = _as_text(record.get("content"))

        tokens = _as_string_tuple(record.get("tokens"))
        if tokens is None:
            tokens = tuple(tokenize(content))
        doc_id = _as_text(record.get("id")) or derive_document_id(url, title, content, tokens, position)
        keywords = _as_string_tuple(record.get("keywords")) or ()

        return cls(id=doc_id, title=title, url=url, content=content, tokens=tokens, keywords=keywords)

    @classmethod
    def from_faq(
        cls,
        question: str,
        answer: str,
        keywords: Iterable[str] = (),
        *,
        id: str | None = None,  # noqa: A002 - mirrors the record field name
        url: str = "",
    ) -> Self:
        """Build a page from a question/answer pair.

        The question, answer and keywords are all indexed; the answer alone
        is the content that reply snippets are cut from.
        """
        keyword_list = tuple(keyword for keyword in keywords if keyword)
        indexed_text = " ".join([question, answer, *keyword_list])
        doc_id = id or derive_document_id(url, question, answer)
        return cls(
            id=doc_id,
            title=question,
            url=url,
            content=answer,
            tokens=tuple(tokenize(indexed_text)),
            keywords=keyword_list,
        )


@std_dataclass(frozen=True)
class MatchResult:
    """Best page for a query, with its combined score and reply snippet."""

    document: Document
    score: float
    snippet: str
    tfidf_score: float = 0.0
    fuzzy_score: float = 0.0


class FormattedResponse(BaseModel):
    """Reply payload for the chat layer.

    ``needs_admin`` is the uniform signal that the question should be
    routed to a human. Serialized with camelCase aliases
    (``sourceUrl``, ``sourcePage``, ``needsAdmin``) for the chat client.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    text: str = Field(description="Reply text shown to the user")
    source_url: str | None = Field(default=None, alias="sourceUrl", description="URL of the matched page")
    source_page: str | None = Field(default=None, alias="sourcePage", description="Title of the matched page")
    confidence: float = Field(default=0.0, description="Relative ranking score, not a probability")
    needs_admin: bool = Field(default=False, alias="needsAdmin", description="Escalate to a human")

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)
