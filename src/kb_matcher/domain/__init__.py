"""Domain layer - value objects shared by the matcher and the chat services."""

from kb_matcher.domain.model import Document, FormattedResponse, MatchResult, derive_document_id


__all__ = [
    "Document",
    "FormattedResponse",
    "MatchResult",
    "derive_document_id",
]
