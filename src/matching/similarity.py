"""
Edit-distance similarity used by the fuzzy resolver.
"""
from rapidfuzz.distance import Levenshtein


def levenshtein_distance(a: str, b: str) -> int:
    """Classic edit distance: insertion, deletion and substitution all cost 1."""
    return Levenshtein.distance(a, b)


def similarity(a: str, b: str) -> float:
    """
    Normalized similarity in [0, 1].

    1 - distance / max(len(a), len(b)); two empty strings are identical.
    """
    max_length = max(len(a), len(b))
    if max_length == 0:
        return 1.0
    return 1.0 - levenshtein_distance(a, b) / max_length
