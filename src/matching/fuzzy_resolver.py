"""
Tiered Name/Product Resolution
==============================

Resolves OCR'd worker names and product names against the master lists.

Matching priority for people:
1. Exact match (trimmed)
2. Last-name match, when the input is a bare last name
3. Forced best fuzzy match (no cutoff)

Matching priority for products:
1. Exact match (trimmed)
2. Case-insensitive exact match
3. Forced best fuzzy match, also comparing with katakana voicing marks removed

The fuzzy tiers never give up while candidates exist: the master list is
assumed to contain the right answer, so the closest candidate is always
returned and callers gate on the confidence instead.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from .similarity import similarity


LAST_NAME_CONFIDENCE = 0.95
CASE_INSENSITIVE_CONFIDENCE = 0.98
LAST_NAME_SIMILARITY_WEIGHT = 0.9

# ASCII and full-width (U+3000) spaces
_NAME_SEPARATOR = re.compile(r'[\s　]+')

# Voiced/semi-voiced katakana -> unvoiced base (ガ->カ, パ->ハ, ...)
_VOICED = 'ガギグゲゴザジズゼゾダヂヅデドバビブベボ'
_SEMI_VOICED = 'パピプペポ'
_KANA_BASE = str.maketrans(
    _VOICED + _SEMI_VOICED,
    ''.join(chr(ord(c) - 1) for c in _VOICED) + ''.join(chr(ord(c) - 2) for c in _SEMI_VOICED),
)


class MatchKind(Enum):
    """Which tier produced a match."""
    EXACT = 'exact'
    LAST_NAME = 'lastname'
    FUZZY = 'fuzzy'
    NO_MATCH = 'no_match'


@dataclass(frozen=True)
class MatchResult:
    match: Optional[str]
    confidence: float
    kind: MatchKind
    is_last_name_match: bool = False

    @classmethod
    def no_match(cls) -> 'MatchResult':
        return cls(match=None, confidence=0.0, kind=MatchKind.NO_MATCH)


def extract_last_name(full_name: str) -> str:
    """Return the part before the first run of whitespace (the family name)."""
    stripped = full_name.strip()
    parts = _NAME_SEPARATOR.split(stripped)
    return parts[0] or stripped


def normalize_katakana(text: str) -> str:
    """Strip dakuten/handakuten from katakana so ボ and ホ compare equal."""
    return text.translate(_KANA_BASE)


def _find_exact(trimmed_input: str, candidates: List[str]) -> Optional[str]:
    for candidate in candidates:
        if candidate.strip() == trimmed_input:
            return candidate
    return None


def resolve_person(name: str, candidates: List[str]) -> MatchResult:
    """
    Resolve a handwritten worker name against the employee list.

    Args:
        name: Name as read by OCR
        candidates: Employee names from the master sheet, in sheet order

    Returns:
        MatchResult; NO_MATCH only for empty input or an empty list.
    """
    trimmed = (name or '').strip()
    if not trimmed or not candidates:
        return MatchResult.no_match()

    exact = _find_exact(trimmed, candidates)
    if exact is not None:
        return MatchResult(match=exact, confidence=1.0, kind=MatchKind.EXACT)

    input_last_name = extract_last_name(trimmed)

    # Bare last name: first employee sharing it wins (last names assumed unique)
    if trimmed == input_last_name:
        for candidate in candidates:
            if extract_last_name(candidate) == input_last_name:
                return MatchResult(
                    match=candidate,
                    confidence=LAST_NAME_CONFIDENCE,
                    kind=MatchKind.LAST_NAME,
                    is_last_name_match=True,
                )

    best_match = None
    best_score = -1.0
    for candidate in candidates:
        full_score = similarity(trimmed, candidate.strip())
        last_name_score = similarity(input_last_name, extract_last_name(candidate))
        score = max(full_score, last_name_score * LAST_NAME_SIMILARITY_WEIGHT)
        if score > best_score:
            best_match = candidate
            best_score = score

    return MatchResult(match=best_match, confidence=best_score, kind=MatchKind.FUZZY)


def resolve_product(product: str, candidates: List[str]) -> MatchResult:
    """
    Resolve a handwritten product name against the product list.

    Args:
        product: Product name as read by OCR
        candidates: Product names from the master sheet

    Returns:
        MatchResult; NO_MATCH only for empty input or an empty list.
    """
    trimmed = (product or '').strip()
    if not trimmed or not candidates:
        return MatchResult.no_match()

    exact = _find_exact(trimmed, candidates)
    if exact is not None:
        return MatchResult(match=exact, confidence=1.0, kind=MatchKind.EXACT)

    lowered = trimmed.lower()
    for candidate in candidates:
        if candidate.strip().lower() == lowered:
            return MatchResult(
                match=candidate,
                confidence=CASE_INSENSITIVE_CONFIDENCE,
                kind=MatchKind.EXACT,
            )

    normalized_input = normalize_katakana(trimmed)
    best_match = None
    best_score = -1.0
    for candidate in candidates:
        stripped = candidate.strip()
        score = max(
            similarity(trimmed, stripped),
            similarity(normalized_input, normalize_katakana(stripped)),
        )
        if score > best_score:
            best_match = candidate
            best_score = score

    return MatchResult(match=best_match, confidence=best_score, kind=MatchKind.FUZZY)
