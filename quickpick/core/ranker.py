"""Filter, score and order a pool of picker items for a query."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Sequence

from .items import (
    EMPTY_RESULT,
    NO_MATCH,
    OVERRIDE_RESULT,
    MatchResult,
    QuickPickItem,
    RankedItem,
)
from .matcher import fuzzy_match

FilterOverride = Callable[[QuickPickItem[Any], str], bool]

LABEL_WEIGHT = 2


@dataclass(frozen=True, slots=True)
class RankFlags:
    match_on_description: bool = False
    match_on_detail: bool = False
    filter_override: FilterOverride | None = None
    sort_by_label: bool = False


DEFAULT_FLAGS = RankFlags()


def _label_sort_key(ranked: RankedItem[Any]) -> tuple[str, str]:
    label = ranked.item.label
    return label.casefold(), label


def _sort_runs_by_label(results: list[RankedItem[Any]]) -> list[RankedItem[Any]]:
    # Separators stay where they are; the items between two separators are
    # ordered by label.
    out: list[RankedItem[Any]] = []
    run: list[RankedItem[Any]] = []
    for ranked in results:
        if ranked.item.is_separator:
            out.extend(sorted(run, key=_label_sort_key))
            run = []
            out.append(ranked)
            continue
        run.append(ranked)
    out.extend(sorted(run, key=_label_sort_key))
    return out


def score_item(item: QuickPickItem[Any], query: str, flags: RankFlags = DEFAULT_FLAGS) -> MatchResult:
    label = fuzzy_match(query, item.label)
    description = NO_MATCH
    detail = NO_MATCH
    if flags.match_on_description and item.description:
        description = fuzzy_match(query, item.description)
    if flags.match_on_detail and item.detail:
        detail = fuzzy_match(query, item.detail)
    total = label.score * LABEL_WEIGHT + description.score + detail.score
    return MatchResult(
        score=total,
        label_matches=label.matches,
        description_matches=description.matches,
        detail_matches=detail.matches,
    )


def rank_items(
    pool: Sequence[QuickPickItem[Any]],
    query: str,
    flags: RankFlags = DEFAULT_FLAGS,
) -> list[RankedItem[Any]]:
    q = str(query or "").strip()
    if not q:
        results = [RankedItem(item, EMPTY_RESULT) for item in pool]
        if flags.sort_by_label:
            results = _sort_runs_by_label(results)
        return results

    results: list[RankedItem[Any]] = []
    for item in pool:
        if item.is_separator or item.always_show:
            results.append(RankedItem(item, EMPTY_RESULT))
            continue
        if flags.filter_override is not None:
            if flags.filter_override(item, q):
                results.append(RankedItem(item, OVERRIDE_RESULT))
            continue
        match = score_item(item, q, flags)
        if match.score > 0:
            results.append(RankedItem(item, match))

    # Stable: equal scores keep pool order, and every separator lands ahead
    # of every regular item.
    results.sort(key=lambda r: (0 if r.item.is_separator else 1, -r.score))
    return results


def selectable(ranked: Sequence[RankedItem[Any]]) -> list[RankedItem[Any]]:
    return [entry for entry in ranked if not entry.item.is_separator]


class RankCache:
    """Remembers the last ranking; a hit returns a copy of the same list."""

    def __init__(self) -> None:
        self._key: tuple | None = None
        self._pool: Sequence[QuickPickItem[Any]] | None = None
        self._result: list[RankedItem[Any]] = []

    def rank(
        self,
        pool: Sequence[QuickPickItem[Any]],
        query: str,
        flags: RankFlags = DEFAULT_FLAGS,
    ) -> list[RankedItem[Any]]:
        key = (id(pool), len(pool), str(query or "").strip(), flags)
        if self._key == key and self._pool is pool:
            return list(self._result)
        result = rank_items(pool, query, flags)
        self._key = key
        self._pool = pool
        self._result = result
        return list(result)

    def clear(self) -> None:
        self._key = None
        self._pool = None
        self._result = []


__all__ = [
    "FilterOverride",
    "LABEL_WEIGHT",
    "RankFlags",
    "DEFAULT_FLAGS",
    "score_item",
    "rank_items",
    "selectable",
    "RankCache",
]
