"""Fuzzy keyword matching for typo-tolerant chat queries.

Two tokens are considered the same keyword when their normalized edit
similarity ``1 - distance / max(len(a), len(b))`` is strictly greater than
0.75. That tolerates a typo or a plural on most words ("volunter" vs
"volunteer") while rejecting unrelated words.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence


FUZZY_MATCH_THRESHOLD = 0.75


def levenshtein_distance(s1: str, s2: str, max_distance: int | None = None) -> int:
    """Calculate the Levenshtein (edit) distance between two strings.

    Uses dynamic programming for O(m*n) time complexity, with optional
    early termination when distance exceeds max_distance.

    Args:
        s1: First string.
        s2: Second string.
        max_distance: If provided, return max_distance+1 early when
            distance is guaranteed to exceed this threshold.

    Returns:
        The minimum number of single-character edits (insertions,
        deletions, substitutions) needed to change s1 into s2.
        If max_distance is set and exceeded, returns max_distance+1.

    Examples:
        >>> levenshtein_distance("volunter", "volunteer")
        1
        >>> levenshtein_distance("", "abc")
        3
    """
    if not s1:
        return len(s2)
    if not s2:
        return len(s1)

    if len(s1) > len(s2):
        s1, s2 = s2, s1

    m, n = len(s1), len(s2)

    if max_distance is not None and n - m > max_distance:
        return max_distance + 1

    prev_row = list(range(m + 1))
    curr_row = [0] * (m + 1)

    for j in range(1, n + 1):
        curr_row[0] = j
        row_min = j
        for i in range(1, m + 1):
            cost = 0 if s1[i - 1] == s2[j - 1] else 1
            curr_row[i] = min(
                prev_row[i] + 1,  # deletion
                curr_row[i - 1] + 1,  # insertion
                prev_row[i - 1] + cost,  # substitution
            )
            row_min = min(row_min, curr_row[i])

        if max_distance is not None and row_min > max_distance:
            return max_distance + 1

        prev_row, curr_row = curr_row, prev_row

    return prev_row[m]


def string_similarity(s1: str, s2: str) -> float:
    """Return edit similarity in [0, 1]; two empty strings are identical."""
    max_len = max(len(s1), len(s2))
    if max_len == 0:
        return 1.0
    if s1 == s2:
        return 1.0
    return 1.0 - levenshtein_distance(s1, s2) / max_len


def best_fuzzy_similarity(
    term: str,
    candidates: Iterable[str],
    threshold: float = FUZZY_MATCH_THRESHOLD,
) -> float:
    """Return the best similarity above ``threshold`` between term and candidates.

    Returns 0.0 when no candidate clears the threshold.
    """
    best = 0.0
    for candidate in candidates:
        max_len = max(len(term), len(candidate))
        if max_len == 0:
            similarity = 1.0
        else:
            # Length gap bounds the distance from below, skip hopeless pairs.
            if 1.0 - abs(len(term) - len(candidate)) / max_len <= max(threshold, best):
                continue
            cutoff = int(max_len * (1.0 - threshold))
            distance = levenshtein_distance(term, candidate, max_distance=cutoff)
            similarity = 1.0 - distance / max_len
        if similarity > threshold and similarity > best:
            best = similarity
            if best == 1.0:
                break
    return best


def fuzzy_keyword_score(
    query_tokens: Sequence[str],
    document_tokens: Iterable[str],
    threshold: float = FUZZY_MATCH_THRESHOLD,
) -> float:
    """Average best fuzzy similarity of each query token against the document.

    Query tokens without a qualifying match contribute 0 to the average.
    """
    if not query_tokens:
        return 0.0
    vocabulary = list(dict.fromkeys(document_tokens))
    if not vocabulary:
        return 0.0
    total = sum(best_fuzzy_similarity(token, vocabulary, threshold) for token in query_tokens)
    return total / len(query_tokens)


def has_fuzzy_match(term: str, candidates: Iterable[str], threshold: float = FUZZY_MATCH_THRESHOLD) -> bool:
    return best_fuzzy_similarity(term, candidates, threshold) > 0.0
