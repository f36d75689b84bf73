from unittest.mock import MagicMock

import pytest

from quickpick.core.items import ItemActivation, QuickPickItem, QuickPickItemSection
from quickpick.core.keybindings import PickerAction
from quickpick.core.session import QuickPickCallbacks, QuickPickSession
from quickpick.settings_schema import QuickPickOptions


def _callbacks():
    return QuickPickCallbacks(
        on_select=MagicMock(),
        on_select_many=MagicMock(),
        on_close=MagicMock(),
        on_back=MagicMock(),
        on_value_change=MagicMock(),
        on_active_item_change=MagicMock(),
        on_item_button_click=MagicMock(),
    )


def test_requires_exactly_one_item_source(palette_items):
    with pytest.raises(ValueError):
        QuickPickSession()
    with pytest.raises(ValueError):
        QuickPickSession(items=palette_items, provider=lambda q: [])


def test_static_query_filters_and_reports(palette_items, labels):
    callbacks = _callbacks()
    session = QuickPickSession(items=palette_items, callbacks=callbacks)
    assert session.status_text() == "3 items"

    assert session.set_query("of") is True
    assert labels(session.ranked) == ["Open File", "Open Folder"]
    assert session.status_text() == '2 items matching "of"'
    callbacks.on_value_change.assert_called_once_with("of")

    assert session.set_query("of") is False
    assert callbacks.on_value_change.call_count == 1


def test_single_item_status_and_no_results(palette_items):
    session = QuickPickSession(items=palette_items, options=QuickPickOptions(no_results_message="Nothing"))
    session.set_query("close")
    assert session.status_text() == '1 item matching "close"'
    session.set_query("zzz")
    assert session.ranked == []
    assert session.active_index == -1
    assert session.no_results_text() == "Nothing"


def test_sections_flatten_with_headers(labels):
    sections = [
        QuickPickItemSection("File", [QuickPickItem("Open File")]),
        QuickPickItemSection("View", [QuickPickItem("Toggle Terminal")]),
    ]
    session = QuickPickSession(items=sections)
    assert labels(session.ranked) == ["File", "Open File", "View", "Toggle Terminal"]
    assert session.active_item().label == "Open File"


def test_initial_value_and_activation(palette_items, labels):
    options = QuickPickOptions(value="o", item_activation=ItemActivation.LAST)
    session = QuickPickSession(items=palette_items, options=options)
    assert session.query == "o"
    assert session.active_index == len(session.selectable_results()) - 1


def test_single_select_accept(palette_items):
    callbacks = _callbacks()
    session = QuickPickSession(items=palette_items, callbacks=callbacks)
    assert session.navigate(PickerAction.NEXT) is True
    assert session.navigate("accept") is True
    callbacks.on_select.assert_called_once_with(palette_items[1])
    callbacks.on_close.assert_not_called()
    assert session.closed
    assert session.navigate(PickerAction.NEXT) is False


def test_accept_with_no_results_does_nothing(palette_items):
    callbacks = _callbacks()
    session = QuickPickSession(items=palette_items, callbacks=callbacks)
    session.set_query("zzz")
    assert session.accept() is False
    assert not session.closed
    callbacks.on_select.assert_not_called()


def test_multi_select_accept_returns_picked_set(palette_items):
    callbacks = _callbacks()
    session = QuickPickSession(
        items=palette_items,
        options=QuickPickOptions(can_select_many=True),
        callbacks=callbacks,
    )
    session.navigate(PickerAction.TOGGLE)
    session.navigate(PickerAction.LAST)
    session.navigate(PickerAction.TOGGLE)
    assert session.status_text() == "3 items (2 selected)"
    session.accept()
    callbacks.on_select_many.assert_called_once_with([palette_items[0], palette_items[2]])
    callbacks.on_select.assert_not_called()


def test_picked_items_survive_refiltering(palette_items):
    session = QuickPickSession(items=palette_items, options=QuickPickOptions(can_select_many=True))
    session.set_query("close")
    session.toggle_active()
    session.set_query("of")
    assert session.picked_items() == [palette_items[2]]
    session.set_query("")
    assert session.is_picked(palette_items[2])


def test_preselected_items_are_seeded():
    items = [QuickPickItem("a", picked=True), QuickPickItem("b")]
    session = QuickPickSession(items=items, options=QuickPickOptions(can_select_many=True))
    assert session.picked_items() == [items[0]]


def test_select_item_toggles_in_multi_select(palette_items):
    callbacks = _callbacks()
    session = QuickPickSession(
        items=palette_items,
        options=QuickPickOptions(can_select_many=True),
        callbacks=callbacks,
    )
    assert session.select_item(palette_items[1]) is True
    assert session.is_picked(palette_items[1])
    assert not session.closed


def test_cancel_in_wizard_goes_back(palette_items):
    callbacks = _callbacks()
    options = QuickPickOptions(is_wizard_step=True, can_go_back=True)
    session = QuickPickSession(items=palette_items, options=options, callbacks=callbacks)
    session.navigate(PickerAction.CANCEL)
    callbacks.on_back.assert_called_once_with()
    callbacks.on_close.assert_not_called()
    assert session.back() is True
    assert callbacks.on_back.call_count == 2


def test_cancel_outside_wizard_closes(palette_items):
    callbacks = _callbacks()
    session = QuickPickSession(items=palette_items, callbacks=callbacks)
    assert session.back() is False
    session.cancel()
    callbacks.on_close.assert_called_once_with()
    callbacks.on_back.assert_not_called()
    session.cancel()
    assert callbacks.on_close.call_count == 1


def test_dispose_is_silent(palette_items):
    callbacks = _callbacks()
    session = QuickPickSession(items=palette_items, callbacks=callbacks)
    session.dispose()
    assert session.closed
    callbacks.on_close.assert_not_called()
    assert session.set_query("x") is False


def test_out_of_order_provider_results_keep_latest():
    session = QuickPickSession(provider=lambda q: [])
    session.set_query("a")
    first = session.begin_request()
    session.set_query("ab")
    second = session.begin_request()
    assert first.token != second.token
    assert session.busy

    assert session.resolve_request(second.token, [QuickPickItem("ab result")]) is True
    assert session.resolve_request(first.token, [QuickPickItem("a result")]) is False
    assert [entry.item.label for entry in session.ranked] == ["ab result"]
    assert not session.busy


def test_provider_results_are_ranked_against_query():
    session = QuickPickSession(provider=lambda q: [])
    session.set_query("zz")
    request = session.begin_request()
    session.resolve_request(request.token, [QuickPickItem("unrelated")])
    assert [entry.item.label for entry in session.ranked] == []
    assert session.is_current(request.token)


def test_provider_failure_empties_pool():
    session = QuickPickSession(provider=lambda q: [])
    request = session.begin_request()
    session.resolve_request(request.token, [QuickPickItem("x")])
    request = session.begin_request()
    assert session.no_results_text() == "Loading..."
    assert session.fail_request(request.token, RuntimeError("boom")) is True
    assert session.pool == []
    assert session.active_index == -1
    assert not session.busy


def test_results_after_close_are_discarded():
    callbacks = _callbacks()
    session = QuickPickSession(provider=lambda q: [], callbacks=callbacks)
    request = session.begin_request()
    session.close()
    assert session.resolve_request(request.token, [QuickPickItem("late")]) is False
    assert session.fail_request(request.token, RuntimeError("late")) is False
    assert session.begin_request() is None
    callbacks.on_active_item_change.assert_not_called()


def test_static_sessions_issue_no_requests(palette_items):
    session = QuickPickSession(items=palette_items)
    assert session.begin_request() is None
    assert not session.is_dynamic


def test_item_button_callback(palette_items):
    callbacks = _callbacks()
    session = QuickPickSession(items=palette_items, callbacks=callbacks)
    session.trigger_item_button(palette_items[0], "pin")
    callbacks.on_item_button_click.assert_called_once_with(palette_items[0], "pin")


def test_active_item_callback_tracks_navigation(palette_items):
    callbacks = _callbacks()
    session = QuickPickSession(items=palette_items, callbacks=callbacks)
    callbacks.on_active_item_change.assert_called_once_with(palette_items[0])
    session.navigate(PickerAction.LAST)
    callbacks.on_active_item_change.assert_called_with(palette_items[2])
