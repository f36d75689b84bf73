"""Ordered-subsequence matching with relevance scoring.

A query matches a candidate when every query character appears in the
candidate, case-insensitively and in order. Matching positions are taken
greedily (first eligible position for each query character), so the
alignment is not guaranteed to be the best-scoring one.
"""

from __future__ import annotations

from .items import NO_MATCH, FieldMatch

CONSECUTIVE_BONUS = 5
START_BONUS = 10
SEPARATOR_BONUS = 8
CAMEL_BONUS = 6
EXACT_CASE_BONUS = 2
MAX_GAP_PENALTY = 3
LENGTH_NORMALIZATION = 10
# Gap penalties on a long scattered match are floored here.
MIN_RAW_SCORE = 1

WORD_SEPARATORS = frozenset("_-./\\")


def _fold(text: str) -> list[str]:
    # Per-character folding keeps indices aligned with the source string.
    return [ch.lower() for ch in text]


def _is_word_separator(ch: str) -> bool:
    return ch.isspace() or ch in WORD_SEPARATORS


def is_subsequence(query: str, text: str) -> bool:
    folded_query = _fold(str(query or ""))
    if not folded_query:
        return True
    qi = 0
    for ch in _fold(str(text or "")):
        if ch == folded_query[qi]:
            qi += 1
            if qi == len(folded_query):
                return True
    return False


def _position_bonus(text: str, index: int) -> int:
    if index == 0:
        return START_BONUS
    prev = text[index - 1]
    if _is_word_separator(prev):
        return SEPARATOR_BONUS
    current = text[index]
    if prev.lower() == prev and current.lower() != current:
        return CAMEL_BONUS
    return 0


def fuzzy_match(query: str, text: str) -> FieldMatch:
    query = str(query or "")
    text = str(text or "")
    if not query:
        return NO_MATCH
    if not is_subsequence(query, text):
        return NO_MATCH

    folded_query = _fold(query)
    matches: list[int] = []
    score = 0
    last_index = -1
    run = 0
    qi = 0
    for ti, ch in enumerate(_fold(text)):
        if qi >= len(folded_query):
            break
        if ch != folded_query[qi]:
            continue

        weight = 1
        if last_index >= 0 and last_index == ti - 1:
            run += 1
            weight += run * CONSECUTIVE_BONUS
        else:
            run = 0
        weight += _position_bonus(text, ti)
        if query[qi] == text[ti]:
            weight += EXACT_CASE_BONUS
        if last_index >= 0 and ti - last_index > 1:
            weight -= min(ti - last_index - 1, MAX_GAP_PENALTY)

        score += weight
        matches.append(ti)
        last_index = ti
        qi += 1

    score = max(score, MIN_RAW_SCORE)
    normalized = score * (1 + LENGTH_NORMALIZATION / (len(text) + LENGTH_NORMALIZATION))
    return FieldMatch(score=normalized, matches=tuple(matches))


__all__ = [
    "CONSECUTIVE_BONUS",
    "START_BONUS",
    "SEPARATOR_BONUS",
    "CAMEL_BONUS",
    "EXACT_CASE_BONUS",
    "MAX_GAP_PENALTY",
    "LENGTH_NORMALIZATION",
    "MIN_RAW_SCORE",
    "is_subsequence",
    "fuzzy_match",
]
