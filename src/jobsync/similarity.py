"""Edit-distance based fuzzy string similarity."""

from __future__ import annotations

from rapidfuzz.distance import Levenshtein


def string_similarity(first: str, second: str) -> float:
    """Return a 0-100 similarity between two strings.

    Both values are lower-cased and trimmed before comparison. Identical
    strings score 100, an empty side scores 0, otherwise the score is the
    share of the longer string left untouched by the Levenshtein edit path.
    """

    s1 = (first or "").lower().strip()
    s2 = (second or "").lower().strip()

    if s1 == s2:
        return 100.0
    if not s1 or not s2:
        return 0.0

    max_len = max(len(s1), len(s2))
    distance = Levenshtein.distance(s1, s2)
    similarity = (max_len - distance) / max_len * 100
    return max(0.0, min(100.0, similarity))


__all__ = ["string_similarity"]
