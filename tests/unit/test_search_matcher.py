"""Unit tests for best-match selection."""

import math

from prometheus_client import REGISTRY
import pytest

from kb_matcher.config import Settings
from kb_matcher.domain.model import Document
from kb_matcher.search.formatter import format_response
from kb_matcher.search.matcher import (
    DEFAULT_THRESHOLD,
    KnowledgeBaseMatcher,
    documents_from_records,
    find_best_match,
)


def _match_count(outcome: str) -> float:
    return REGISTRY.get_sample_value("kb_match_total", {"outcome": outcome}) or 0.0


@pytest.mark.unit
class TestFindBestMatch:
    def test_about_question_matches_about_page(self, seed_faq_by_slug):
        about = seed_faq_by_slug["about"]
        result = find_best_match("What is Wasilah?", [about.to_document()])

        assert result is not None
        assert result.document.id == "faq_about"
        assert result.score >= DEFAULT_THRESHOLD
        assert result.score == pytest.approx(0.598, abs=0.005)
        assert result.snippet == about.answer.rstrip(".")

    def test_highest_score_wins_regardless_of_order(self, volunteer_and_donate_pages):
        result = find_best_match("How can I volunteer?", volunteer_and_donate_pages)

        assert result is not None
        assert result.document.id == "faq_volunteer"
        assert result.score == pytest.approx(0.548, abs=0.005)
        assert result.tfidf_score > 0
        assert result.fuzzy_score == pytest.approx(6 / 7)

    def test_result_never_below_threshold(self, volunteer_and_donate_pages):
        assert find_best_match("How can I volunteer?", volunteer_and_donate_pages, threshold=0.9) is None

    def test_gibberish_returns_none(self, seed_documents):
        assert find_best_match("xyzzy qwerty", seed_documents) is None

    def test_gibberish_escalates_to_admin(self, seed_documents):
        result = find_best_match("asdkjaslkdj nonsense gibberish", seed_documents)
        assert result is None

        response = format_response(result)
        assert response.needs_admin is True
        assert response.confidence == 0

    def test_score_equal_to_threshold_is_accepted(self, volunteer_and_donate_pages):
        score = find_best_match("How can I volunteer?", volunteer_and_donate_pages, threshold=0.0).score

        result = find_best_match("How can I volunteer?", volunteer_and_donate_pages, threshold=score)
        assert result is not None
        assert result.document.id == "faq_volunteer"

    def test_score_just_below_threshold_is_rejected(self, volunteer_and_donate_pages):
        score = find_best_match("How can I volunteer?", volunteer_and_donate_pages, threshold=0.0).score
        threshold = math.nextafter(score, 1.0)
        assert find_best_match("How can I volunteer?", volunteer_and_donate_pages, threshold=threshold) is None

    def test_each_seed_title_finds_its_own_page(self, seed_documents):
        for page in seed_documents:
            result = find_best_match(page.title, seed_documents, threshold=0.0)
            assert result is not None, page.title
            assert result.document.id == page.id, page.title

    def test_page_without_content_replies_with_ellipsis(self):
        (page,) = documents_from_records([{"tokens": [1, "volunteer"]}])
        result = find_best_match("volunteer", [page], threshold=0.0)

        assert result is not None
        assert format_response(result).text == "..."

    def test_empty_query_returns_none(self, seed_documents):
        assert find_best_match("", seed_documents) is None
        assert find_best_match("the is a", seed_documents) is None
        assert find_best_match(None, seed_documents) is None

    def test_empty_collection_returns_none(self):
        assert find_best_match("How can I volunteer?", []) is None
        assert find_best_match("How can I volunteer?", None) is None

    def test_zero_score_never_matches_even_at_zero_threshold(self, make_document):
        pages = [make_document("a", ["alpha"]), make_document("b", ["beta"])]
        assert find_best_match("omega", pages, threshold=0.0) is None

    def test_first_page_wins_ties(self, make_document):
        pages = [
            make_document("first", ["alpha", "beta"]),
            make_document("second", ["alpha", "beta"]),
            make_document("other", ["gamma"]),
        ]
        result = find_best_match("alpha", pages, threshold=0.1)
        assert result is not None
        assert result.document.id == "first"

    def test_pages_without_tokens_are_skipped(self):
        page = Document(id="empty", content="volunteer volunteer", tokens=())
        assert find_best_match("volunteer", [page], threshold=0.0) is None

    def test_typo_still_matches(self, seed_documents):
        result = find_best_match("how to volunter", seed_documents, threshold=0.12)
        assert result is not None
        assert result.document.id == "faq_volunteer"

    def test_does_not_mutate_documents(self, seed_documents):
        before = list(seed_documents)
        find_best_match("Where are you located?", seed_documents)
        assert seed_documents == before

    def test_counts_outcomes(self, seed_documents):
        empty_before = _match_count("empty_query")
        no_docs_before = _match_count("no_documents")
        matched_before = _match_count("matched")

        find_best_match("", seed_documents)
        find_best_match("volunteer", [])
        find_best_match("What is Wasilah?", seed_documents, threshold=0.1)

        assert _match_count("empty_query") == empty_before + 1
        assert _match_count("no_documents") == no_docs_before + 1
        assert _match_count("matched") == matched_before + 1


@pytest.mark.unit
class TestKnowledgeBaseMatcher:
    def test_from_settings_uses_configured_threshold(self, volunteer_and_donate_pages):
        matcher = KnowledgeBaseMatcher.from_settings(Settings(match_threshold=0.95))
        assert matcher.default_threshold == 0.95
        assert matcher.find_best_match("How can I volunteer?", volunteer_and_donate_pages) is None

    def test_explicit_threshold_overrides_default(self, volunteer_and_donate_pages):
        matcher = KnowledgeBaseMatcher(default_threshold=0.95)
        assert matcher.find_best_match("How can I volunteer?", volunteer_and_donate_pages, 0.4) is not None

    def test_snippet_length_follows_settings(self, seed_documents):
        matcher = KnowledgeBaseMatcher.from_settings(Settings(snippet_max_length=20))
        result = matcher.find_best_match("What is Wasilah?", seed_documents, 0.1)
        assert result is not None
        assert len(result.snippet) <= 23
        assert result.snippet.endswith("...")

    def test_expand_query(self):
        assert KnowledgeBaseMatcher().expand_query("Where is the office?") == ["where", "office"]


@pytest.mark.unit
class TestDocumentsFromRecords:
    def test_converts_mappings_and_skips_other_values(self):
        pages = documents_from_records([{"id": "a", "content": "Volunteer today"}, "junk", None])
        assert [page.id for page in pages] == ["a"]
        assert pages[0].tokens == ("volunteer", "today")

    def test_records_without_id_or_text_get_distinct_ids(self):
        pages = documents_from_records([{"tokens": ["volunteer"]}, {"tokens": ["volunteer"]}, {}])
        ids = [page.id for page in pages]
        assert len(set(ids)) == 3
        assert all(page_id.startswith("page_") for page_id in ids)
