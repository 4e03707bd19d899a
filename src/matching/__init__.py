"""
Name and product matching against master data
"""
from .similarity import levenshtein_distance, similarity
from .fuzzy_resolver import MatchKind, MatchResult, resolve_person, resolve_product

__all__ = [
    'levenshtein_distance',
    'similarity',
    'MatchKind',
    'MatchResult',
    'resolve_person',
    'resolve_product',
]
