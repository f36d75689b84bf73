"""Item, section and match-result models shared by the picker engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Generic, Iterable, Sequence, TypeVar, Union

T = TypeVar("T")

ITEM_KIND_DEFAULT = "default"
ITEM_KIND_SEPARATOR = "separator"
ITEM_KINDS = (ITEM_KIND_DEFAULT, ITEM_KIND_SEPARATOR)

HighlightRange = tuple[int, int]  # inclusive start, inclusive end


class ItemActivation(IntEnum):
    FIRST = 1
    SECOND = 2
    LAST = 3


@dataclass(frozen=True, slots=True)
class QuickPickItemButton:
    button_id: str
    tooltip: str = ""
    always_visible: bool = False


@dataclass(frozen=True, slots=True)
class QuickPickHighlights:
    label: tuple[HighlightRange, ...] = ()
    description: tuple[HighlightRange, ...] = ()
    detail: tuple[HighlightRange, ...] = ()


@dataclass(eq=False, slots=True)
class QuickPickItem(Generic[T]):
    """One row of the picker.

    Equality is identity: two items with the same label are still two
    distinct entries for selection and multi-select membership.
    """

    label: str = ""
    description: str | None = None
    detail: str | None = None
    kind: str = ITEM_KIND_DEFAULT
    always_show: bool = False
    picked: bool = False
    data: T | None = None
    buttons: tuple[QuickPickItemButton, ...] = ()
    highlights: QuickPickHighlights | None = None

    def __post_init__(self) -> None:
        self.label = str(self.label or "")
        kind = str(self.kind or ITEM_KIND_DEFAULT).strip().lower()
        self.kind = kind if kind in ITEM_KINDS else ITEM_KIND_DEFAULT
        self.buttons = tuple(self.buttons or ())

    @property
    def is_separator(self) -> bool:
        return self.kind == ITEM_KIND_SEPARATOR

    @classmethod
    def separator(cls, label: str = "") -> "QuickPickItem[Any]":
        return cls(label=label, kind=ITEM_KIND_SEPARATOR)


@dataclass(slots=True)
class QuickPickItemSection(Generic[T]):
    label: str
    items: list[QuickPickItem[T]] = field(default_factory=list)


ItemsInput = Union[Sequence[QuickPickItem[T]], Sequence[QuickPickItemSection[T]]]


def is_sectioned(items: Iterable[object]) -> bool:
    seq = list(items)
    return bool(seq) and isinstance(seq[0], QuickPickItemSection)


def flatten_items(items: ItemsInput | None) -> list[QuickPickItem[Any]]:
    """Turn a list of sections into a flat list with a separator per section."""
    if not items:
        return []
    if not is_sectioned(items):
        return [item for item in items if isinstance(item, QuickPickItem)]

    out: list[QuickPickItem[Any]] = []
    for section in items:
        if not isinstance(section, QuickPickItemSection):
            continue
        out.append(QuickPickItem.separator(section.label))
        out.extend(item for item in section.items if isinstance(item, QuickPickItem))
    return out


@dataclass(frozen=True, slots=True)
class FieldMatch:
    score: float = 0.0
    matches: tuple[int, ...] = ()


NO_MATCH = FieldMatch()


@dataclass(frozen=True, slots=True)
class MatchResult:
    score: float = 0.0
    label_matches: tuple[int, ...] = ()
    description_matches: tuple[int, ...] = ()
    detail_matches: tuple[int, ...] = ()


EMPTY_RESULT = MatchResult()
OVERRIDE_RESULT = MatchResult(score=1.0)


@dataclass(frozen=True, slots=True)
class RankedItem(Generic[T]):
    item: QuickPickItem[T]
    match: MatchResult = EMPTY_RESULT

    @property
    def score(self) -> float:
        return self.match.score


def ranges_to_indices(ranges: Iterable[HighlightRange]) -> tuple[int, ...]:
    indices: set[int] = set()
    for start, end in ranges:
        lo, hi = (int(start), int(end)) if start <= end else (int(end), int(start))
        indices.update(range(max(0, lo), hi + 1))
    return tuple(sorted(indices))


__all__ = [
    "ITEM_KIND_DEFAULT",
    "ITEM_KIND_SEPARATOR",
    "HighlightRange",
    "ItemActivation",
    "QuickPickItemButton",
    "QuickPickHighlights",
    "QuickPickItem",
    "QuickPickItemSection",
    "ItemsInput",
    "is_sectioned",
    "flatten_items",
    "FieldMatch",
    "NO_MATCH",
    "MatchResult",
    "EMPTY_RESULT",
    "OVERRIDE_RESULT",
    "RankedItem",
    "ranges_to_indices",
]
