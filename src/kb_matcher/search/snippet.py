"""Reply snippet extraction.

The reply shown to the user is the single sentence of the matched page that
covers the most query tokens, so answers stay short and on topic.

Smart Defaults:
- Naive sentence split on runs of ``.``, ``!`` and ``?``
- Fuzzy token comparison, same threshold as the relevance scorer
- Long sentences are cut at ``max_length`` and suffixed with ``...``
"""

from __future__ import annotations

from collections.abc import Sequence
import re

from kb_matcher.search.analyzers import tokenize
from kb_matcher.search.fuzzy import FUZZY_MATCH_THRESHOLD, has_fuzzy_match


SENTENCE_SPLIT_PATTERN = re.compile(r"[.!?]+")
ELLIPSIS = "..."
DEFAULT_MAX_LENGTH = 300


def split_sentences(text: str) -> list[str]:
    """Split text into non-blank sentence fragments, untrimmed."""
    if not text:
        return []
    return [fragment for fragment in SENTENCE_SPLIT_PATTERN.split(text) if fragment.strip()]


def sentence_coverage(
    sentence: str,
    query_tokens: Sequence[str],
    threshold: float = FUZZY_MATCH_THRESHOLD,
) -> float:
    """Fraction of query tokens with a fuzzy match among the sentence tokens."""
    if not query_tokens:
        return 0.0
    sentence_tokens = list(dict.fromkeys(tokenize(sentence)))
    if not sentence_tokens:
        return 0.0
    matched = sum(1 for token in query_tokens if has_fuzzy_match(token, sentence_tokens, threshold))
    return matched / len(query_tokens)


def truncate(text: str, max_length: int = DEFAULT_MAX_LENGTH) -> str:
    if len(text) > max_length:
        return text[:max_length] + ELLIPSIS
    return text


def extract_snippet(
    content: str,
    query_tokens: Sequence[str],
    max_length: int = DEFAULT_MAX_LENGTH,
    threshold: float = FUZZY_MATCH_THRESHOLD,
) -> str:
    """Pick the most query-relevant sentence of ``content``.

    Ties keep the earliest sentence. When no sentence covers any query
    token, the first ``max_length`` characters of the content are returned
    with ``...`` appended, so empty content yields ``...``.

    Args:
        content: Full page text.
        query_tokens: Expanded query tokens.
        max_length: Maximum characters before the ``...`` suffix.
        threshold: Fuzzy similarity a token pair must exceed.

    Returns:
        A string of at most ``max_length + 3`` characters.
    """
    best_sentence = ""
    best_score = 0.0
    for sentence in split_sentences(content):
        coverage = sentence_coverage(sentence, query_tokens, threshold)
        if coverage > best_score:
            best_score = coverage
            best_sentence = sentence.strip()

    if not best_sentence:
        return (content or "")[:max_length] + ELLIPSIS

    return truncate(best_sentence, max_length)
