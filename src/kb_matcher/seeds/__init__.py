"""Starter knowledge base used when no pages have been ingested yet."""

from kb_matcher.seeds.faqs import SEED_FAQS, SeedFaq, build_seed_documents


__all__ = ["SEED_FAQS", "SeedFaq", "build_seed_documents"]
