"""Tokenizer for knowledge base pages and user queries.

Text is lowercased, punctuation is replaced by whitespace, and the result is
split into word tokens. Tokens of two characters or fewer and common English
function words are dropped because they carry little topical signal.

The same analyzer runs at ingestion time (to precompute ``Document.tokens``)
and at query time, so both sides always agree on what a token is.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
import re


# Word characters follow ASCII semantics so accented or non-Latin letters
# are treated as separators, same as the browser-side tokenizer did.
_NON_WORD_PATTERN = re.compile(r"[^\w\s]", re.ASCII)
_WHITESPACE_PATTERN = re.compile(r"\s+")

MIN_TOKEN_LENGTH = 3

DEFAULT_STOPWORDS: frozenset[str] = frozenset(
    {
        "the",
        "is",
        "at",
        "which",
        "on",
        "a",
        "an",
        "and",
        "or",
        "but",
        "in",
        "with",
        "to",
        "for",
        "of",
        "as",
        "by",
        "that",
        "this",
        "are",
        "was",
        "were",
        "been",
        "be",
        "have",
        "has",
        "had",
        "do",
        "does",
        "did",
        "will",
        "would",
        "could",
        "should",
        "can",
        "may",
        "might",
        "must",
        "from",
        "about",
        "into",
        "through",
    }
)

TokenFilter = Callable[[Iterable[str]], Iterator[str]]


def split_words(text: str) -> Iterator[str]:
    """Yield raw lowercase words with punctuation removed."""
    normalized = _NON_WORD_PATTERN.sub(" ", text.lower())
    for word in _WHITESPACE_PATTERN.split(normalized):
        if word:
            yield word


class MinLengthFilter:
    """Drops tokens shorter than ``min_length`` characters."""

    def __init__(self, min_length: int = MIN_TOKEN_LENGTH) -> None:
        self.min_length = min_length

    def __call__(self, tokens: Iterable[str]) -> Iterator[str]:
        for token in tokens:
            if len(token) >= self.min_length:
                yield token


class StopFilter:
    """Removes stopwords from the stream."""

    def __init__(self, stopwords: Iterable[str] | None = None) -> None:
        vocab = stopwords if stopwords is not None else DEFAULT_STOPWORDS
        self.stopwords = frozenset(word.lower() for word in vocab)

    def __call__(self, tokens: Iterable[str]) -> Iterator[str]:
        for token in tokens:
            if token not in self.stopwords:
                yield token


class Analyzer:
    """Word splitter followed by a chain of token filters."""

    def __init__(self, filters: Iterable[TokenFilter] | None = None) -> None:
        self.filters = list(filters) if filters is not None else [MinLengthFilter(), StopFilter()]

    def __call__(self, text: str | None) -> list[str]:
        if not text:
            return []
        stream: Iterable[str] = split_words(text)
        for token_filter in self.filters:
            stream = token_filter(stream)
        return list(stream)


_DEFAULT_ANALYZER = Analyzer()


def tokenize(text: str | None) -> list[str]:
    """Return content tokens of ``text`` in occurrence order.

    Duplicates are preserved so term frequencies can be computed from the
    result. Empty input, or input without a qualifying token, yields ``[]``.

    Examples:
        >>> tokenize("How can I volunteer at Wasilah?")
        ['how', 'volunteer', 'wasilah']
        >>> tokenize("")
        []
    """
    return _DEFAULT_ANALYZER(text)


def is_stopword(word: str) -> bool:
    return word.lower() in DEFAULT_STOPWORDS
