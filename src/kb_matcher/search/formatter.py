"""Turn a match result into the reply payload for the chat layer."""

from __future__ import annotations

from kb_matcher.domain.model import FormattedResponse, MatchResult


NO_MATCH_TEXT = (
    "Hmm, I couldn't find that right now, but I've noted it for our admin to check. "
    "You'll get an update soon!"
)


def format_response(match: MatchResult | None) -> FormattedResponse:
    """Wrap ``match`` for the chat layer; no match means escalate to an admin."""
    if match is None:
        return FormattedResponse(
            text=NO_MATCH_TEXT,
            source_url=None,
            source_page=None,
            confidence=0.0,
            needs_admin=True,
        )

    page = match.document
    return FormattedResponse(
        text=match.snippet,
        source_url=page.url or None,
        source_page=page.display_name or None,
        confidence=match.score,
        needs_admin=False,
    )
