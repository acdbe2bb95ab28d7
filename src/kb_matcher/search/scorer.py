"""Combined relevance score for a query against one knowledge base page."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from kb_matcher.search.fuzzy import FUZZY_MATCH_THRESHOLD, fuzzy_keyword_score
from kb_matcher.search.stats import CorpusStatistics, HasTokens, cosine_similarity


DEFAULT_TFIDF_WEIGHT = 0.6
DEFAULT_FUZZY_WEIGHT = 0.4


@dataclass(frozen=True)
class ScoreBreakdown:
    tfidf: float
    fuzzy: float
    combined: float


class RelevanceScorer:
    """Weighted sum of TF-IDF cosine similarity and fuzzy keyword overlap.

    The cosine part rewards terms that are frequent in the page but rare in
    the collection. The fuzzy part rewards keyword overlap regardless of
    collection statistics and tolerates typos. The sum is a ranking signal,
    not a calibrated probability.
    """

    def __init__(
        self,
        *,
        tfidf_weight: float = DEFAULT_TFIDF_WEIGHT,
        fuzzy_weight: float = DEFAULT_FUZZY_WEIGHT,
        fuzzy_threshold: float = FUZZY_MATCH_THRESHOLD,
    ) -> None:
        self.tfidf_weight = tfidf_weight
        self.fuzzy_weight = fuzzy_weight
        self.fuzzy_threshold = fuzzy_threshold

    def breakdown(
        self,
        query_tokens: Sequence[str],
        document_tokens: Sequence[str],
        corpus: CorpusStatistics | Sequence[HasTokens],
    ) -> ScoreBreakdown:
        stats = corpus if isinstance(corpus, CorpusStatistics) else CorpusStatistics.from_documents(corpus)
        tfidf = cosine_similarity(query_tokens, document_tokens, stats)
        fuzzy = fuzzy_keyword_score(query_tokens, document_tokens, self.fuzzy_threshold)
        combined = self.tfidf_weight * tfidf + self.fuzzy_weight * fuzzy
        return ScoreBreakdown(tfidf=tfidf, fuzzy=fuzzy, combined=combined)

    def score(
        self,
        query_tokens: Sequence[str],
        document_tokens: Sequence[str],
        corpus: CorpusStatistics | Sequence[HasTokens],
    ) -> float:
        """Return the combined score of ``document_tokens`` for ``query_tokens``.

        Args:
            query_tokens: Expanded query tokens.
            document_tokens: Precomputed tokens of the candidate page.
            corpus: Either precomputed statistics or the whole page
                collection the candidate belongs to.
        """
        return self.breakdown(query_tokens, document_tokens, corpus).combined


_DEFAULT_SCORER = RelevanceScorer()


def score(
    query_tokens: Sequence[str],
    document_tokens: Sequence[str],
    corpus: CorpusStatistics | Sequence[HasTokens],
) -> float:
    return _DEFAULT_SCORER.score(query_tokens, document_tokens, corpus)
