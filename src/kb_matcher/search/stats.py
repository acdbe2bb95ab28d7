"""TF-IDF statistics and cosine similarity over token lists.

Document frequencies are gathered once per match call and shared by every
candidate, so scoring a collection costs one pass over it instead of one
pass per term per document.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
import math
from typing import Protocol


class HasTokens(Protocol):
    tokens: Sequence[str]


@dataclass(frozen=True)
class CorpusStatistics:
    """Document count and per-term document frequency for a collection."""

    document_count: int
    document_frequencies: Counter[str] = field(default_factory=Counter)

    @classmethod
    def from_token_lists(cls, token_lists: Iterable[Sequence[str]]) -> CorpusStatistics:
        frequencies: Counter[str] = Counter()
        count = 0
        for tokens in token_lists:
            count += 1
            frequencies.update(set(tokens))
        return cls(document_count=count, document_frequencies=frequencies)

    @classmethod
    def from_documents(cls, documents: Iterable[HasTokens]) -> CorpusStatistics:
        return cls.from_token_lists(document.tokens for document in documents)

    def document_frequency(self, term: str) -> int:
        return self.document_frequencies.get(term, 0)

    def idf(self, term: str) -> float:
        return inverse_document_frequency(self.document_frequency(term), self.document_count)


def term_frequency(term: str, tokens: Sequence[str]) -> float:
    """Occurrences of ``term`` divided by the length of ``tokens``."""
    if not tokens:
        return 0.0
    return tokens.count(term) / len(tokens)


def inverse_document_frequency(doc_freq: int, total_docs: int) -> float:
    """Return ``log(total_docs / (1 + doc_freq))``.

    The value is not floored. A term present in most documents of a small
    collection gets a negative weight, and the cosine score absorbs that
    because both sides of a shared term carry the same sign.
    """
    if total_docs <= 0:
        return 0.0
    return math.log(total_docs / (1 + max(doc_freq, 0)))


def tfidf_vector(tokens: Sequence[str], corpus: CorpusStatistics) -> dict[str, float]:
    """Map each distinct term of ``tokens`` to its TF-IDF weight."""
    if not tokens:
        return {}
    length = len(tokens)
    counts = Counter(tokens)
    return {term: (count / length) * corpus.idf(term) for term, count in counts.items()}


def cosine_similarity(
    query_tokens: Sequence[str],
    document_tokens: Sequence[str],
    corpus: CorpusStatistics,
) -> float:
    """Cosine similarity of the TF-IDF vectors of query and document.

    Returns 0.0 when either vector has zero magnitude.
    """
    query_vector = tfidf_vector(query_tokens, corpus)
    document_vector = tfidf_vector(document_tokens, corpus)

    dot_product = sum(weight * document_vector.get(term, 0.0) for term, weight in query_vector.items())
    query_magnitude = math.sqrt(sum(weight * weight for weight in query_vector.values()))
    document_magnitude = math.sqrt(sum(weight * weight for weight in document_vector.values()))

    if query_magnitude == 0 or document_magnitude == 0:
        return 0.0

    return dot_product / (query_magnitude * document_magnitude)
