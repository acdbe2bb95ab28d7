"""Synonym expansion for chat queries.

The table maps a query token to the extra terms appended to the query.
It mixes English synonyms with Roman Urdu bridge terms, so a question typed
as "kahan hai office" still reaches English-authored pages about locations.

Expansion is one level deep: appended terms are never expanded again.

Example:
    - "kaise" appends "how", "apply", "join", "register"
    - "volunteer" appends "help", "participate", "contribute", "join", "madad"
"""
# ruff: noqa: ERA001  # Comments label table sections

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence

from kb_matcher.search.analyzers import tokenize


# Order of mapped terms is preserved in the expanded query.
DEFAULT_SYNONYMS: dict[str, tuple[str, ...]] = {
    # English core
    "help": ("assist", "support", "aid"),
    "volunteer": ("help", "participate", "contribute", "join", "madad"),
    "donate": ("give", "contribute", "support", "fund"),
    "project": ("program", "initiative", "activity"),
    "projects": ("programs", "initiatives", "activities"),
    "event": ("activity", "program", "gathering"),
    "events": ("activities", "programs", "gatherings"),
    "location": ("address", "place", "office", "where"),
    "contact": ("reach", "email", "phone", "call"),
    "about": ("info", "information", "what", "who"),
    # Roman Urdu question words
    "kya": ("what", "about", "info"),
    "kia": ("what", "about", "info"),
    "hai": ("is", "about"),
    "kaise": ("how", "apply", "join", "register"),
    "kesay": ("how", "apply", "join", "register"),
    "kahan": ("where", "location", "address", "office"),
    "kidhar": ("where", "location", "address", "office"),
    "kab": ("when", "time", "schedule"),
    # Roman Urdu verbs and nouns
    "madad": ("help", "support", "assist"),
    "rabta": ("contact", "reach", "email", "phone"),
    "raabta": ("contact", "reach", "email", "phone"),
    "shamil": ("join", "participate"),
    "apply": ("register", "join"),
    "register": ("apply", "join"),
    # Frequent misspellings and name variants
    "projectz": ("projects",),
    "ivent": ("event",),
    "ivents": ("events",),
    "wasilah": ("wasila", "waseela", "waseelaa"),
}


class SynonymExpander:
    """Appends mapped terms to a token sequence."""

    def __init__(self, synonyms: Mapping[str, Sequence[str]] | None = None) -> None:
        """Initialize with synonym mappings.

        Args:
            synonyms: Custom synonym mappings. If None, uses DEFAULT_SYNONYMS.
        """
        self._synonyms = dict(synonyms) if synonyms is not None else DEFAULT_SYNONYMS

    def synonyms_for(self, term: str) -> tuple[str, ...]:
        return tuple(self._synonyms.get(term.lower(), ()))

    def expand_tokens(self, tokens: Iterable[str]) -> list[str]:
        """Return tokens followed by their synonyms, deduplicated.

        Original tokens come first in their own order, then the synonyms of
        each token in turn. Only the first occurrence of a term is kept.
        """
        originals = list(tokens)
        expanded = list(originals)
        for token in originals:
            expanded.extend(self.synonyms_for(token))
        return list(dict.fromkeys(expanded))


_DEFAULT_EXPANDER = SynonymExpander()


def expand_query(query: str | None, synonyms: Mapping[str, Sequence[str]] | None = None) -> list[str]:
    """Tokenize ``query`` and widen it with synonym and bridge terms.

    Args:
        query: Raw user query.
        synonyms: Optional custom synonym mappings.

    Returns:
        Deduplicated expanded tokens, empty when the query has no content
        tokens.
    """
    expander = _DEFAULT_EXPANDER if synonyms is None else SynonymExpander(synonyms)
    return expander.expand_tokens(tokenize(query))
