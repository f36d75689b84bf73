import concurrent.futures

import pytest

from quickpick.core.items import QuickPickItem
from quickpick.ui.controllers.quick_pick_controller import QuickPickController


class InlineExecutor(concurrent.futures.Executor):
    def submit(self, fn, /, *args, **kwargs):
        future = concurrent.futures.Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as exc:
            future.set_exception(exc)
        return future


class FakeProvider:
    """Hands out futures the test resolves explicitly, in any order."""

    def __init__(self):
        self.calls = []
        self.pending = {}

    def __call__(self, query):
        self.calls.append(query)
        future = concurrent.futures.Future()
        self.pending[query] = future
        return future


def _labels(controller):
    return [entry.item.label for entry in controller.session.ranked]


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def dynamic(provider):
    controller = QuickPickController(provider=provider, executor=InlineExecutor())
    yield controller
    controller.shutdown()


def test_open_requests_immediately(dynamic, provider):
    busy = []
    dynamic.busyChanged.connect(busy.append)
    dynamic.open()
    assert provider.calls == [""]
    assert busy == [True]
    assert dynamic.session.busy

    provider.pending[""].set_result([QuickPickItem("alpha"), QuickPickItem("beta")])
    dynamic.drain_results()
    assert _labels(dynamic) == ["alpha", "beta"]
    assert busy == [True, False]
    assert not dynamic.result_pump.isActive()


def test_query_changes_are_debounced(dynamic, provider):
    values = []
    dynamic.valueChanged.connect(values.append)
    dynamic.set_query("a")
    dynamic.set_query("ab")
    assert dynamic.debounce_timer.isActive()
    assert dynamic.debounce_timer.interval() == 150
    assert provider.calls == []
    assert values == ["a", "ab"]

    dynamic.flush_pending()
    assert provider.calls == ["ab"]
    assert not dynamic.debounce_timer.isActive()


def test_late_result_for_older_query_is_dropped(dynamic, provider):
    dynamic.set_query("a")
    dynamic.flush_pending()
    dynamic.set_query("ab")
    dynamic.flush_pending()

    provider.pending["ab"].set_result([QuickPickItem("ab item")])
    dynamic.drain_results()
    provider.pending["a"].set_result([QuickPickItem("a item")])
    dynamic.drain_results()
    assert _labels(dynamic) == ["ab item"]
    assert not dynamic.session.busy


def test_provider_error_reports_and_clears():
    def _broken(query):
        raise RuntimeError("index offline")

    controller = QuickPickController(provider=_broken, executor=InlineExecutor())
    messages = []
    busy = []
    controller.statusMessage.connect(messages.append)
    controller.busyChanged.connect(busy.append)
    controller.open()
    controller.drain_results()
    assert messages == ["Could not load items: index offline"]
    assert busy == [True, False]
    assert controller.session.pool == []
    assert controller.session.no_results_text() == "No matching items"
    controller.shutdown()


def test_close_cancels_pending_work(dynamic, provider):
    closed = []
    finished = []
    dynamic.closed.connect(lambda: closed.append(True))
    dynamic.finished.connect(lambda: finished.append(True))
    dynamic.open()
    dynamic.set_query("x")
    dynamic.close()

    assert closed == [True]
    assert finished == [True]
    assert dynamic.is_finished
    assert provider.pending[""].cancelled()
    assert not dynamic.debounce_timer.isActive()
    assert not dynamic.result_pump.isActive()
    dynamic.set_query("y")
    assert provider.calls == [""]


def test_static_keyboard_flow(palette_items):
    controller = QuickPickController(items=palette_items)
    indices = []
    selected = []
    controller.activeIndexChanged.connect(indices.append)
    controller.itemSelected.connect(selected.append)

    assert controller.handle_chord("Down") is True
    assert indices == [1]
    assert controller.handle_chord("Space") is False
    assert controller.handle_chord("Return") is True
    assert selected == [palette_items[1]]
    assert controller.is_finished
    assert controller.handle_chord("Down") is False


def test_escape_closes_static_picker(palette_items):
    controller = QuickPickController(items=palette_items)
    closed = []
    controller.closed.connect(lambda: closed.append(True))
    assert controller.handle_chord("Esc") is True
    assert closed == [True]


def test_escape_in_wizard_requests_back(palette_items):
    controller = QuickPickController(
        items=palette_items,
        options={"isWizardStep": True, "canGoBack": True},
    )
    back = []
    closed = []
    controller.backRequested.connect(lambda: back.append(True))
    controller.closed.connect(lambda: closed.append(True))
    assert controller.handle_chord("Esc") is True
    assert back == [True]
    assert closed == []
    assert not controller.is_finished
    controller.shutdown()


def test_multi_select_toggle_and_accept(palette_items):
    controller = QuickPickController(items=palette_items, options={"can_select_many": True})
    views = []
    chosen = []
    controller.viewChanged.connect(lambda: views.append(True))
    controller.itemsSelected.connect(chosen.append)
    assert controller.handle_chord("Space") is True
    assert views == [True]
    controller.handle_chord("End")
    controller.activate_item(palette_items[2])
    controller.handle_chord("Enter")
    assert chosen == [[palette_items[0], palette_items[2]]]


def test_item_button_signal(palette_items):
    controller = QuickPickController(items=palette_items)
    clicks = []
    controller.itemButtonClicked.connect(lambda item, button: clicks.append((item, button)))
    controller.trigger_item_button(palette_items[0], "pin")
    assert clicks == [(palette_items[0], "pin")]
    controller.shutdown()


def test_static_items_build_a_ready_controller(palette_items):
    controller = QuickPickController(items=palette_items, options={"item_activation": "last"})
    assert controller.session.active_item() is palette_items[2]
    assert controller.session.active_index == 2
    indices = []
    controller.activeIndexChanged.connect(indices.append)
    controller.handle_chord("Up")
    assert indices == [1]
    controller.shutdown()


def test_pump_stays_up_until_a_late_result_lands(dynamic, provider):
    dynamic.open()
    dynamic.drain_results()
    assert dynamic.result_pump.isActive()
    assert dynamic.session.busy

    provider.pending[""].set_result([QuickPickItem("late")])
    assert dynamic.result_pump.isActive()
    dynamic.drain_results()
    assert _labels(dynamic) == ["late"]
    assert not dynamic.session.busy
    assert not dynamic.result_pump.isActive()


class DrainOnDiscard(set):
    """Runs a pump tick right before a finished future leaves the set."""

    def __init__(self, controller):
        super().__init__()
        self.controller = controller

    def discard(self, item):
        self.controller.drain_results()
        super().discard(item)


def test_pump_tick_while_result_is_queued_delivers_it(provider):
    controller = QuickPickController(provider=provider, executor=InlineExecutor())
    controller._active_futures = DrainOnDiscard(controller)
    controller.open()
    controller.set_query("ab")
    controller.flush_pending()

    provider.pending[""].set_result([QuickPickItem("stale")])
    provider.pending["ab"].set_result([QuickPickItem("ab item")])
    assert _labels(controller) == ["ab item"]
    assert not controller.session.busy

    controller.drain_results()
    assert not controller.result_pump.isActive()
    assert controller._result_queue.empty()
    controller.shutdown()
