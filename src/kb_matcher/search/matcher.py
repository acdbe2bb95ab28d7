"""Best-match selection over a knowledge base page collection.

Deep module with a minimal interface:
- Hides query expansion, corpus statistics, scoring and snippet extraction
- Simple interface: find_best_match(query, documents, threshold)

Every call works on its own snapshot of the collection and keeps no state,
so one matcher instance can serve concurrent chat sessions.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
import logging
import time

from kb_matcher.config import Settings
from kb_matcher.domain.model import Document, MatchResult
from kb_matcher.observability.metrics import MATCH_COUNT, MATCH_LATENCY
from kb_matcher.observability.tracing import create_span
from kb_matcher.search.analyzers import tokenize
from kb_matcher.search.scorer import RelevanceScorer, ScoreBreakdown
from kb_matcher.search.snippet import DEFAULT_MAX_LENGTH, extract_snippet
from kb_matcher.search.stats import CorpusStatistics
from kb_matcher.search.synonyms import SynonymExpander


logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.4


class KnowledgeBaseMatcher:
    """Finds the page that best answers a chat question."""

    def __init__(
        self,
        *,
        scorer: RelevanceScorer | None = None,
        expander: SynonymExpander | None = None,
        snippet_max_length: int = DEFAULT_MAX_LENGTH,
        default_threshold: float = DEFAULT_THRESHOLD,
    ) -> None:
        self.scorer = scorer or RelevanceScorer()
        self.expander = expander or SynonymExpander()
        self.snippet_max_length = snippet_max_length
        self.default_threshold = default_threshold

    @classmethod
    def from_settings(cls, settings: Settings) -> KnowledgeBaseMatcher:
        scorer = RelevanceScorer(
            tfidf_weight=settings.tfidf_weight,
            fuzzy_weight=settings.fuzzy_weight,
            fuzzy_threshold=settings.fuzzy_similarity_threshold,
        )
        return cls(
            scorer=scorer,
            snippet_max_length=settings.snippet_max_length,
            default_threshold=settings.match_threshold,
        )

    def expand_query(self, query: str | None) -> list[str]:
        return self.expander.expand_tokens(tokenize(query))

    def find_best_match(
        self,
        query: str | None,
        documents: Iterable[Document] | None,
        threshold: float | None = None,
    ) -> MatchResult | None:
        """Return the best page for ``query``, or None when nothing is confident.

        A page replaces the current best only when its score is strictly
        greater and at least ``threshold``, so the first page reaching the
        top score wins ties. Pages with no tokens are skipped.

        Args:
            query: Raw user question.
            documents: Page collection snapshot, in caller order.
            threshold: Minimum combined score; defaults to the matcher's.

        Returns:
            MatchResult with page, score and reply snippet, or None.
        """
        threshold = self.default_threshold if threshold is None else threshold
        pages = list(documents or ())
        query_tokens = self.expand_query(query)

        if not query_tokens or not pages:
            outcome = "empty_query" if not query_tokens else "no_documents"
            MATCH_COUNT.labels(outcome=outcome).inc()
            logger.debug("Match skipped", extra={"outcome": outcome, "documents": len(pages)})
            return None

        attributes = {
            "kb.query_tokens": len(query_tokens),
            "kb.documents": len(pages),
            "kb.threshold": threshold,
        }
        start = time.perf_counter()
        with create_span("kb.match", attributes=attributes) as span:
            best_page, best = self._select(query_tokens, pages, threshold)
            result = self._build_result(best_page, best, query_tokens)
            span.set_attribute("kb.score", result.score if result else 0.0)

        outcome = "matched" if result is not None else "no_match"
        MATCH_LATENCY.labels(outcome=outcome).observe(time.perf_counter() - start)
        MATCH_COUNT.labels(outcome=outcome).inc()
        logger.debug(
            "Match finished",
            extra={
                "outcome": outcome,
                "query_tokens": len(query_tokens),
                "documents": len(pages),
                "score": round(result.score, 4) if result else 0.0,
                "document_id": result.document.id if result else None,
            },
        )
        return result

    def _select(
        self,
        query_tokens: Sequence[str],
        pages: Sequence[Document],
        threshold: float,
    ) -> tuple[Document | None, ScoreBreakdown | None]:
        corpus = CorpusStatistics.from_documents(pages)
        best_page: Document | None = None
        best: ScoreBreakdown | None = None
        best_score = 0.0

        for page in pages:
            if not page.tokens:
                continue
            breakdown = self.scorer.breakdown(query_tokens, page.tokens, corpus)
            if breakdown.combined > best_score and breakdown.combined >= threshold:
                best_score = breakdown.combined
                best_page = page
                best = breakdown

        return best_page, best

    def _build_result(
        self,
        page: Document | None,
        breakdown: ScoreBreakdown | None,
        query_tokens: Sequence[str],
    ) -> MatchResult | None:
        if page is None or breakdown is None:
            return None
        snippet = extract_snippet(
            page.content,
            query_tokens,
            max_length=self.snippet_max_length,
            threshold=self.scorer.fuzzy_threshold,
        )
        return MatchResult(
            document=page,
            score=breakdown.combined,
            snippet=snippet,
            tfidf_score=breakdown.tfidf,
            fuzzy_score=breakdown.fuzzy,
        )


def documents_from_records(records: Iterable[Mapping]) -> list[Document]:
    """Convert loosely typed page records at the ingestion boundary."""
    return [
        Document.from_record(record, position=position)
        for position, record in enumerate(records)
        if isinstance(record, Mapping)
    ]


_DEFAULT_MATCHER = KnowledgeBaseMatcher()


def find_best_match(
    query: str | None,
    documents: Iterable[Document] | None,
    threshold: float = DEFAULT_THRESHOLD,
) -> MatchResult | None:
    """Module-level shortcut using the default matcher configuration."""
    return _DEFAULT_MATCHER.find_best_match(query, documents, threshold)


__all__ = [
    "DEFAULT_THRESHOLD",
    "KnowledgeBaseMatcher",
    "documents_from_records",
    "find_best_match",
]
