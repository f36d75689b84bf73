"""Active-row and multi-select bookkeeping for the selectable view."""

from __future__ import annotations

from typing import Callable, Generic, Iterable, Sequence, TypeVar

from .items import ItemActivation, QuickPickItem

T = TypeVar("T")

PAGE_SIZE = 10


class SelectionController(Generic[T]):
    """Tracks the active index into the selectable (non-separator) view.

    ``active_index`` is ``-1`` exactly when the view is empty, otherwise it
    stays inside ``[0, count - 1]``. Movement clamps at both ends. The
    picked set is keyed by item identity and survives view changes.
    """

    def __init__(
        self,
        *,
        can_select_many: bool = False,
        on_active_changed: Callable[[QuickPickItem[T] | None], None] | None = None,
    ) -> None:
        self.can_select_many = bool(can_select_many)
        self._on_active_changed = on_active_changed
        self._view: list[QuickPickItem[T]] = []
        self._active_index = -1
        self._active_item: QuickPickItem[T] | None = None
        self._picked: dict[int, QuickPickItem[T]] = {}

    # ---------- View ----------

    @property
    def active_index(self) -> int:
        return self._active_index

    @property
    def count(self) -> int:
        return len(self._view)

    def active_item(self) -> QuickPickItem[T] | None:
        if 0 <= self._active_index < len(self._view):
            return self._view[self._active_index]
        return None

    def set_view(
        self,
        items: Sequence[QuickPickItem[T]],
        *,
        activation: ItemActivation | None = None,
    ) -> None:
        self._view = [item for item in items if not item.is_separator]
        if activation is not None:
            self._apply(self._initial_index(activation))
            return
        self._apply(self._active_index)

    def _initial_index(self, activation: ItemActivation) -> int:
        if not self._view:
            return -1
        if activation == ItemActivation.LAST:
            return len(self._view) - 1
        if activation == ItemActivation.SECOND and len(self._view) > 1:
            return 1
        return 0

    def _apply(self, index: int) -> None:
        count = len(self._view)
        if count == 0:
            clamped = -1
        else:
            clamped = max(0, min(int(index), count - 1))
        previous_index = self._active_index
        self._active_index = clamped
        item = self.active_item()
        if item is self._active_item and clamped == previous_index:
            return
        self._active_item = item
        if self._on_active_changed is not None:
            self._on_active_changed(item)

    # ---------- Navigation ----------

    def set_active(self, index: int) -> None:
        self._apply(index)

    def move_next(self) -> None:
        self._apply(self._active_index + 1)

    def move_prev(self) -> None:
        self._apply(self._active_index - 1)

    def move_first(self) -> None:
        self._apply(0)

    def move_last(self) -> None:
        self._apply(len(self._view) - 1)

    def page_forward(self) -> None:
        self._apply(self._active_index + PAGE_SIZE)

    def page_backward(self) -> None:
        self._apply(self._active_index - PAGE_SIZE)

    def cycle_forward(self) -> None:
        self.move_next()

    def cycle_backward(self) -> None:
        self.move_prev()

    # ---------- Multi-select ----------

    def seed_picked(self, items: Iterable[QuickPickItem[T]]) -> None:
        for item in items:
            if item.picked and not item.is_separator:
                self._picked.setdefault(id(item), item)

    def is_picked(self, item: QuickPickItem[T]) -> bool:
        return id(item) in self._picked and self._picked[id(item)] is item

    def picked_items(self) -> list[QuickPickItem[T]]:
        return list(self._picked.values())

    @property
    def picked_count(self) -> int:
        return len(self._picked)

    def toggle(self, item: QuickPickItem[T] | None) -> bool:
        if not self.can_select_many or item is None or item.is_separator:
            return False
        key = id(item)
        if key in self._picked:
            self._picked.pop(key, None)
        else:
            self._picked[key] = item
        return True

    def toggle_active(self) -> bool:
        return self.toggle(self.active_item())


__all__ = ["PAGE_SIZE", "SelectionController"]
