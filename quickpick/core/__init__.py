"""Matching, ranking, highlighting and selection engine of the picker."""

from .items import (
    FieldMatch,
    ItemActivation,
    MatchResult,
    QuickPickHighlights,
    QuickPickItem,
    QuickPickItemButton,
    QuickPickItemSection,
    RankedItem,
    flatten_items,
)
from .matcher import fuzzy_match, is_subsequence
from .ranker import RankCache, RankFlags, rank_items, selectable
from .highlighter import TextSegment, highlight_segments
from .selection import SelectionController
from .keybindings import PickerAction

__all__ = [
    "FieldMatch",
    "ItemActivation",
    "MatchResult",
    "QuickPickHighlights",
    "QuickPickItem",
    "QuickPickItemButton",
    "QuickPickItemSection",
    "RankedItem",
    "flatten_items",
    "fuzzy_match",
    "is_subsequence",
    "RankCache",
    "RankFlags",
    "rank_items",
    "selectable",
    "TextSegment",
    "highlight_segments",
    "SelectionController",
    "PickerAction",
]
