"""End-to-end chat flows over the seed knowledge base."""

import pytest

from kb_matcher.config import Settings
from kb_matcher.seeds.faqs import build_seed_documents
from kb_matcher.services.chat_responder import ChatResponder


pytestmark = pytest.mark.integration


@pytest.fixture
def responder():
    return ChatResponder(build_seed_documents(), settings=Settings(rate_limit_max_messages=20))


@pytest.mark.parametrize(
    ("question", "expected_page"),
    [
        ("How can I volunteer?", "How can I volunteer?"),
        ("What events do you organize?", "What events do you organize?"),
        ("How do I contact you?", "How do I contact you?"),
        ("Can I submit a project idea?", "Can I submit a project idea?"),
        ("kahan office", "Where are you located?"),
    ],
)
def test_seed_questions_route_to_their_page(responder, question, expected_page):
    reply = responder.respond("visitor", question)
    assert reply.match_type == "intelligent"
    assert reply.meta["source_page"] == expected_page


def test_conversation_with_escalation(responder):
    greeting = responder.respond("visitor", "Salam")
    assert greeting.match_type == "intent"

    offer = responder.respond("visitor", "xyzzy")
    assert offer.needs_admin is True

    unrelated = responder.respond("visitor", "ok")
    assert unrelated is not None

    # Escalation only follows an explicit offer
    responder.replace_documents([])
    offered = responder.respond("visitor", "anything else?")
    assert offered.meta["needs_admin_offer"] is True
    confirmed = responder.respond("visitor", "haan", previous_bot_meta=offered.meta)
    assert confirmed.match_type == "escalated"
