"""Seed FAQ entries for the Wasilah knowledge base."""

from __future__ import annotations

from dataclasses import dataclass

from kb_matcher.domain.model import Document


DEFAULT_FAQ_URL = "/faq"


@dataclass(frozen=True, slots=True)
class SeedFaq:
    slug: str
    question: str
    answer: str
    keywords: tuple[str, ...]
    tags: tuple[str, ...]

    def to_document(self, base_url: str = DEFAULT_FAQ_URL) -> Document:
        url = f"{base_url}#{self.slug}" if base_url else ""
        return Document.from_faq(
            self.question,
            self.answer,
            self.keywords,
            id=f"faq_{self.slug}",
            url=url,
        )


SEED_FAQS: tuple[SeedFaq, ...] = (
    SeedFaq(
        slug="about",
        question="What is Wasilah?",
        answer=(
            "Wasilah is a community service organization dedicated to creating positive change through "
            "education, healthcare, environmental initiatives, and community development projects."
        ),
        keywords=("wasilah", "organization", "about", "who", "what"),
        tags=("general", "about"),
    ),
    SeedFaq(
        slug="volunteer",
        question="How can I volunteer?",
        answer=(
            "You can volunteer by visiting our 'Join Us' page and filling out the volunteer application form. "
            "Our team will review your application and contact you within 3-5 business days with available "
            "opportunities."
        ),
        keywords=("volunteer", "join", "help", "participate", "contribute"),
        tags=("volunteer", "join"),
    ),
    SeedFaq(
        slug="projects",
        question="What types of projects do you run?",
        answer=(
            "We run various projects including education programs, healthcare initiatives, environmental "
            "conservation efforts, and community development projects. Each project is designed to create "
            "lasting positive impact in communities."
        ),
        keywords=("projects", "programs", "initiatives", "types", "work"),
        tags=("projects", "general"),
    ),
    SeedFaq(
        slug="donate",
        question="How can I donate or support?",
        answer=(
            "You can support Wasilah through volunteering, spreading awareness, or contributing resources. "
            "Please visit our Contact page to discuss specific ways you can help make a difference."
        ),
        keywords=("donate", "support", "help", "contribute", "give"),
        tags=("support", "donate"),
    ),
    SeedFaq(
        slug="location",
        question="Where are you located?",
        answer=(
            "We have offices in Karachi, Lahore, and Islamabad. Our projects span across multiple cities in "
            "Pakistan. Visit our Contact page for detailed addresses and contact information."
        ),
        keywords=("location", "office", "address", "where", "city"),
        tags=("contact", "location"),
    ),
    SeedFaq(
        slug="events",
        question="What events do you organize?",
        answer=(
            "We organize various community events including health fairs, educational workshops, environmental "
            "initiatives, and community gatherings. Check our Events page for upcoming activities and "
            "registration details."
        ),
        keywords=("events", "activities", "workshops", "programs", "calendar"),
        tags=("events", "programs"),
    ),
    SeedFaq(
        slug="contact",
        question="How do I contact you?",
        answer=(
            "You can reach us through our Contact page where you'll find our email, phone numbers, and office "
            "locations. Our team typically responds within 24 hours."
        ),
        keywords=("contact", "email", "phone", "reach", "communicate"),
        tags=("contact", "support"),
    ),
    SeedFaq(
        slug="submit-idea",
        question="Can I submit a project idea?",
        answer=(
            "Yes! We welcome community-driven project ideas. You can submit your proposal through our chat "
            "widget on the Events or Projects page, or contact us directly through our Contact page."
        ),
        keywords=("submit", "idea", "proposal", "suggest", "pitch"),
        tags=("projects", "submit"),
    ),
)


def build_seed_documents(base_url: str = DEFAULT_FAQ_URL) -> list[Document]:
    """Return the seed FAQs as knowledge base pages, in seed order."""
    return [faq.to_document(base_url) for faq in SEED_FAQS]
