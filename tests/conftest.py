"""Shared test fixtures and configuration."""

import pytest

from kb_matcher.config import Settings, get_settings
from kb_matcher.domain.model import Document
from kb_matcher.seeds.faqs import SEED_FAQS, build_seed_documents


# Every setting the matcher reads, cleared so the developer's shell cannot leak into tests
SETTINGS_ENV = [name.upper() for name in Settings.model_fields]


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Reset environment-driven settings before each test."""
    for key in SETTINGS_ENV:
        monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def seed_documents():
    """The eight seed FAQ pages, in seed order."""
    return build_seed_documents()


@pytest.fixture
def seed_faq_by_slug():
    return {faq.slug: faq for faq in SEED_FAQS}


@pytest.fixture
def volunteer_and_donate_pages(seed_faq_by_slug):
    """Two overlapping FAQ pages, donation first."""
    return [
        seed_faq_by_slug["donate"].to_document(),
        seed_faq_by_slug["volunteer"].to_document(),
    ]


@pytest.fixture
def make_document():
    """Factory for pages with explicit tokens."""

    def _make(doc_id: str, tokens, content: str = "", title: str = "", url: str = "") -> Document:
        return Document(id=doc_id, title=title, url=url, content=content, tokens=tuple(tokens))

    return _make
