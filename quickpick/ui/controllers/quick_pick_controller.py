"""Qt-aware driver for a picker session: debounce, provider workers, signals."""

from __future__ import annotations

import concurrent.futures
import logging
import queue
from typing import Any, Mapping

from PySide6.QtCore import QObject, QTimer, Signal

from quickpick.core.items import ItemsInput, QuickPickItem
from quickpick.core.keybindings import PickerAction, action_for_chord, normalize_keybindings
from quickpick.core.session import ItemProvider, ProviderRequest, QuickPickCallbacks, QuickPickSession
from quickpick.settings_schema import QuickPickOptions

logger = logging.getLogger(__name__)


class QuickPickController(QObject):
    itemSelected = Signal(object)          # QuickPickItem
    itemsSelected = Signal(list)           # list[QuickPickItem]
    closed = Signal()
    backRequested = Signal()
    valueChanged = Signal(str)
    activeItemChanged = Signal(object)     # QuickPickItem | None
    activeIndexChanged = Signal(int)
    itemButtonClicked = Signal(object, str)
    viewChanged = Signal()
    busyChanged = Signal(bool)
    statusMessage = Signal(str)
    finished = Signal()

    def __init__(
        self,
        *,
        items: ItemsInput | None = None,
        provider: ItemProvider | None = None,
        options: QuickPickOptions | Mapping[str, Any] | None = None,
        keybindings: Mapping[str, list[str]] | None = None,
        executor: concurrent.futures.Executor | None = None,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        if isinstance(options, QuickPickOptions):
            self.options = options
        else:
            self.options = QuickPickOptions.from_mapping(dict(options or {}))
        self._keybindings = normalize_keybindings(keybindings)

        self._owns_executor = executor is None
        self._executor = executor or concurrent.futures.ThreadPoolExecutor(
            max_workers=2,
            thread_name_prefix="pytpo-quickpick",
        )
        self._active_futures: set[concurrent.futures.Future] = set()
        self._result_queue: queue.Queue[tuple[int, object, BaseException | None]] = queue.Queue()

        self._result_pump = QTimer(self)
        self._result_pump.setInterval(16)
        self._result_pump.timeout.connect(self.drain_results)

        self._debounce_timer = QTimer(self)
        self._debounce_timer.setSingleShot(True)
        self._debounce_timer.timeout.connect(self.flush_pending)

        self._finished = False
        self._opened = False

        callbacks = QuickPickCallbacks(
            on_select=self._on_select,
            on_select_many=self._on_select_many,
            on_close=self._on_close,
            on_back=self.backRequested.emit,
            on_value_change=self.valueChanged.emit,
            on_active_item_change=self._on_active_item_change,
            on_item_button_click=self.itemButtonClicked.emit,
        )
        self.session: QuickPickSession[Any] = QuickPickSession(
            items=items,
            provider=provider,
            options=self.options,
            callbacks=callbacks,
        )

    # ---------- Timers ----------

    @property
    def debounce_timer(self) -> QTimer:
        return self._debounce_timer

    @property
    def result_pump(self) -> QTimer:
        return self._result_pump

    @property
    def is_finished(self) -> bool:
        return self._finished

    # ---------- Public API ----------

    def open(self) -> None:
        if self._opened or self._finished:
            return
        self._opened = True
        if self.session.is_dynamic:
            self.flush_pending()
        self.viewChanged.emit()

    def set_query(self, text: str) -> None:
        if self._finished:
            return
        if not self.session.set_query(text):
            return
        if self.session.is_dynamic:
            self._debounce_timer.stop()
            self._debounce_timer.start(int(self.options.debounce_ms))
        self.viewChanged.emit()

    def flush_pending(self) -> None:
        self._debounce_timer.stop()
        request = self.session.begin_request()
        if request is None:
            return
        self.busyChanged.emit(True)
        self._start_request(request)

    def handle_chord(self, chord_text: str) -> bool:
        if self._finished:
            return False
        action = action_for_chord(self._keybindings, chord_text, self.options)
        if action is None:
            return False
        self.trigger_action(action)
        return True

    def trigger_action(self, action: PickerAction | str) -> bool:
        if self._finished:
            return False
        handled = self.session.navigate(action)
        if handled and not self._finished and action == PickerAction.TOGGLE:
            self.viewChanged.emit()
        return handled

    def set_active_index(self, index: int) -> None:
        if self._finished:
            return
        self.session.set_active_index(index)

    def activate_item(self, item: QuickPickItem[Any]) -> bool:
        if self._finished:
            return False
        handled = self.session.select_item(item)
        if handled and not self._finished:
            self.viewChanged.emit()
        return handled

    def trigger_item_button(self, item: QuickPickItem[Any], button_id: str) -> None:
        self.session.trigger_item_button(item, button_id)

    def close(self) -> None:
        self.session.close()
        self._teardown()

    def shutdown(self) -> None:
        self.session.dispose()
        self._teardown()
        self._finished = True

    # ---------- Provider workers ----------

    def _call_provider(self, query: str) -> object:
        provider = self.session.provider
        if provider is None:
            return []
        return provider(query)

    def _start_request(self, request: ProviderRequest) -> None:
        try:
            future = self._executor.submit(self._call_provider, request.query)
        except Exception as exc:
            self._result_queue.put((request.token, None, exc))
            self.drain_results()
            return
        self._active_futures.add(future)
        if not self._result_pump.isActive():
            self._result_pump.start()
        future.add_done_callback(lambda fut, token=request.token: self._queue_result(token, fut))

    def _queue_result(self, token: int, future: concurrent.futures.Future) -> None:
        # Discard only after queueing; the pump stops once both are empty.
        try:
            if future.cancelled():
                return
            try:
                payload = future.result()
            except Exception as exc:
                self._result_queue.put((token, None, exc))
                return
            if isinstance(payload, concurrent.futures.Future):
                # Providers may hand back their own future; chain it without
                # parking a worker thread on it.
                self._active_futures.add(payload)
                payload.add_done_callback(lambda fut, t=token: self._queue_result(t, fut))
                return
            self._result_queue.put((token, payload, None))
        finally:
            self._active_futures.discard(future)

    def drain_results(self) -> None:
        while True:
            try:
                token, payload, error = self._result_queue.get_nowait()
            except queue.Empty:
                break
            self._handle_result(token, payload, error)
        if not self._active_futures and self._result_queue.empty():
            self._result_pump.stop()

    def _handle_result(self, token: int, payload: object, error: BaseException | None) -> None:
        if self._finished:
            return
        if error is None:
            try:
                items = list(payload or [])
            except TypeError as exc:
                error = exc
            else:
                if self.session.resolve_request(token, items):
                    self.busyChanged.emit(False)
                    self.viewChanged.emit()
                return

        if self.session.fail_request(token, error):
            self.statusMessage.emit(f"Could not load items: {error}")
            self.busyChanged.emit(False)
            self.viewChanged.emit()

    # ---------- Session callbacks ----------

    def _on_select(self, item: QuickPickItem[Any]) -> None:
        self._teardown()
        self.itemSelected.emit(item)
        self._emit_finished()

    def _on_select_many(self, items: list[QuickPickItem[Any]]) -> None:
        self._teardown()
        self.itemsSelected.emit(list(items))
        self._emit_finished()

    def _on_close(self) -> None:
        self._teardown()
        self.closed.emit()
        self._emit_finished()

    def _on_active_item_change(self, item: QuickPickItem[Any] | None) -> None:
        # The session reports its initial activation from inside its own
        # constructor, before ``self.session`` is bound.
        session = getattr(self, "session", None)
        if session is None:
            return
        self.activeItemChanged.emit(item)
        self.activeIndexChanged.emit(session.active_index)

    def _emit_finished(self) -> None:
        if self._finished:
            return
        self._finished = True
        self.finished.emit()

    def _teardown(self) -> None:
        self._debounce_timer.stop()
        try:
            self._result_pump.stop()
        except Exception:
            pass

        for fut in list(self._active_futures):
            try:
                fut.cancel()
            except Exception:
                pass
        self._active_futures.clear()

        while True:
            try:
                self._result_queue.get_nowait()
            except queue.Empty:
                break

        if self._owns_executor:
            try:
                self._executor.shutdown(wait=False, cancel_futures=True)
            except Exception:
                logger.debug("Quick pick executor shutdown failed", exc_info=True)


__all__ = ["QuickPickController"]
