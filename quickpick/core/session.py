"""State of one open picker: query, pool, ranked view, selection, requests.

The session is a plain mutable object. Every mutating call recomputes the
ranked view from ``(pool, query, flags)`` and clamps the selection, so the
state after any event is a deterministic function of the inputs. Timers and
threads live in the Qt controller; the session only compares request tokens.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, Sequence, TypeVar

from quickpick.settings_schema import DEFAULT_NO_RESULTS_MESSAGE, QuickPickOptions

from .items import ItemsInput, QuickPickItem, RankedItem, flatten_items
from .keybindings import PickerAction
from .ranker import RankCache, selectable
from .selection import SelectionController

logger = logging.getLogger(__name__)

T = TypeVar("T")

ItemProvider = Callable[[str], Any]


@dataclass(slots=True)
class QuickPickCallbacks(Generic[T]):
    on_select: Callable[[QuickPickItem[T]], None] | None = None
    on_select_many: Callable[[list[QuickPickItem[T]]], None] | None = None
    on_close: Callable[[], None] | None = None
    on_back: Callable[[], None] | None = None
    on_value_change: Callable[[str], None] | None = None
    on_active_item_change: Callable[[QuickPickItem[T] | None], None] | None = None
    on_item_button_click: Callable[[QuickPickItem[T], str], None] | None = None


@dataclass(frozen=True, slots=True)
class ProviderRequest:
    token: int
    query: str


class QuickPickSession(Generic[T]):
    def __init__(
        self,
        *,
        items: ItemsInput | None = None,
        provider: ItemProvider | None = None,
        options: QuickPickOptions | None = None,
        callbacks: QuickPickCallbacks[T] | None = None,
    ) -> None:
        if items is not None and provider is not None:
            raise ValueError("A picker session takes either static items or a provider, not both.")
        if items is None and provider is None:
            raise ValueError("A picker session needs static items or a provider.")

        self.options = options or QuickPickOptions()
        self.callbacks = callbacks or QuickPickCallbacks()
        self.provider = provider
        self._flags = self.options.rank_flags()
        self._cache = RankCache()

        self.query: str = str(self.options.value or "")
        self.pool: list[QuickPickItem[T]] = flatten_items(items) if items is not None else []
        self.ranked: list[RankedItem[T]] = []
        self.busy = False
        self.closed = False
        self._token = 0

        self.selection: SelectionController[T] = SelectionController(
            can_select_many=self.options.can_select_many,
            on_active_changed=self._emit_active_changed,
        )
        self.selection.seed_picked(self.pool)
        self._recompute(activation=self.options.item_activation)

    # ---------- Views ----------

    @property
    def is_dynamic(self) -> bool:
        return self.provider is not None

    @property
    def active_index(self) -> int:
        return self.selection.active_index

    def active_item(self) -> QuickPickItem[T] | None:
        return self.selection.active_item()

    def selectable_results(self) -> list[RankedItem[T]]:
        return selectable(self.ranked)

    def picked_items(self) -> list[QuickPickItem[T]]:
        return self.selection.picked_items()

    def is_picked(self, item: QuickPickItem[T]) -> bool:
        return self.selection.is_picked(item)

    def status_text(self) -> str:
        count = self.selection.count
        text = f"{count} item{'' if count == 1 else 's'}"
        if self.query:
            text += f' matching "{self.query}"'
        if self.options.can_select_many and self.selection.picked_count > 0:
            text += f" ({self.selection.picked_count} selected)"
        return text

    def no_results_text(self) -> str:
        if self.busy:
            return "Loading..."
        return self.options.no_results_message or DEFAULT_NO_RESULTS_MESSAGE

    # ---------- Recompute ----------

    def _recompute(self, *, activation=None) -> None:
        self.ranked = self._cache.rank(self.pool, self.query, self._flags)
        self.selection.set_view([entry.item for entry in self.ranked], activation=activation)

    def _emit_active_changed(self, item: QuickPickItem[T] | None) -> None:
        if self.closed:
            return
        if self.callbacks.on_active_item_change is not None:
            self.callbacks.on_active_item_change(item)

    # ---------- Query ----------

    def set_query(self, text: str) -> bool:
        if self.closed:
            return False
        value = str(text or "")
        if value == self.query:
            return False
        self.query = value
        if self.is_dynamic:
            self._token += 1
        if self.callbacks.on_value_change is not None:
            self.callbacks.on_value_change(value)
        self._recompute()
        return True

    # ---------- Provider requests ----------

    @property
    def latest_token(self) -> int:
        return self._token

    def is_current(self, token: int) -> bool:
        return not self.closed and int(token) == self._token

    def begin_request(self) -> ProviderRequest | None:
        if self.closed or not self.is_dynamic:
            return None
        self.busy = True
        return ProviderRequest(token=self._token, query=self.query)

    def resolve_request(self, token: int, items: Sequence[QuickPickItem[T]] | None) -> bool:
        if not self.is_current(token):
            logger.debug("Discarding stale provider result (token %s, latest %s)", token, self._token)
            return False
        pool = flatten_items(list(items or []))
        self.pool = pool
        self.busy = False
        self.selection.seed_picked(pool)
        self._recompute()
        return True

    def fail_request(self, token: int, error: BaseException | None = None) -> bool:
        if not self.is_current(token):
            return False
        logger.warning("Item provider failed for query %r: %s", self.query, error, exc_info=error)
        self.pool = []
        self.busy = False
        self._recompute()
        return True

    # ---------- Actions ----------

    def navigate(self, action: PickerAction | str) -> bool:
        if self.closed:
            return False
        try:
            action = PickerAction(action)
        except ValueError:
            return False
        handlers = {
            PickerAction.NEXT: self.selection.move_next,
            PickerAction.PREVIOUS: self.selection.move_prev,
            PickerAction.FIRST: self.selection.move_first,
            PickerAction.LAST: self.selection.move_last,
            PickerAction.PAGE_FORWARD: self.selection.page_forward,
            PickerAction.PAGE_BACKWARD: self.selection.page_backward,
            PickerAction.CYCLE_FORWARD: self.selection.cycle_forward,
            PickerAction.CYCLE_BACKWARD: self.selection.cycle_backward,
        }
        handler = handlers.get(action)
        if handler is not None:
            handler()
            return True
        if action == PickerAction.TOGGLE:
            return self.toggle_active()
        if action == PickerAction.ACCEPT:
            return self.accept()
        if action == PickerAction.CANCEL:
            self.cancel()
            return True
        if action == PickerAction.BACK:
            return self.back()
        return False

    def set_active_index(self, index: int) -> None:
        if self.closed:
            return
        self.selection.set_active(index)

    def toggle_active(self) -> bool:
        if self.closed:
            return False
        return self.selection.toggle_active()

    def select_item(self, item: QuickPickItem[T]) -> bool:
        """Mouse activation of a row: toggles in multi-select, commits otherwise."""
        if self.closed or item is None or item.is_separator:
            return False
        if self.options.can_select_many:
            return self.selection.toggle(item)
        self._finish()
        if self.callbacks.on_select is not None:
            self.callbacks.on_select(item)
        return True

    def accept(self) -> bool:
        if self.closed:
            return False
        if self.options.can_select_many:
            picked = self.selection.picked_items()
            self._finish()
            if self.callbacks.on_select_many is not None:
                self.callbacks.on_select_many(picked)
            return True

        item = self.selection.active_item()
        if item is None:
            return False
        self._finish()
        if self.callbacks.on_select is not None:
            self.callbacks.on_select(item)
        return True

    def back(self) -> bool:
        if self.closed or not self.options.back_enabled:
            return False
        if self.callbacks.on_back is not None:
            self.callbacks.on_back()
        return True

    def cancel(self) -> None:
        if self.closed:
            return
        if self.options.back_enabled and self.callbacks.on_back is not None:
            self.callbacks.on_back()
            return
        self.close()

    def close(self) -> None:
        if self.closed:
            return
        self._finish()
        self._emit_close()

    def dispose(self) -> None:
        """Close without emitting anything; pending requests become stale."""
        if self.closed:
            return
        self._finish()

    def trigger_item_button(self, item: QuickPickItem[T], button_id: str) -> None:
        if self.closed or item is None:
            return
        if self.callbacks.on_item_button_click is not None:
            self.callbacks.on_item_button_click(item, str(button_id or ""))

    def _finish(self) -> None:
        self.closed = True
        self.busy = False
        self._token += 1

    def _emit_close(self) -> None:
        if self.callbacks.on_close is not None:
            self.callbacks.on_close()


__all__ = ["ItemProvider", "QuickPickCallbacks", "ProviderRequest", "QuickPickSession"]
