from PySide6.QtCore import QEvent, Qt
from PySide6.QtGui import QKeyEvent
from PySide6.QtWidgets import QApplication

from quickpick.core.items import QuickPickItem, QuickPickItemSection
from quickpick.ui.controllers.quick_pick_controller import QuickPickController
from quickpick.ui.widgets.quick_pick_widget import QuickPickWidget, key_event_chord_text


def _widget(items, options=None):
    controller = QuickPickController(items=items, options=options)
    return controller, QuickPickWidget(controller)


def test_rows_follow_the_query(palette_items):
    controller, widget = _widget(palette_items)
    assert widget.list_widget.count() == 3
    assert widget.status_label.text() == "3 items"

    widget.query_edit.setText("of")
    assert widget.list_widget.count() == 2
    assert widget.status_label.text() == '2 items matching "of"'
    assert widget.list_widget.currentRow() == 0

    widget.query_edit.setText("zzz")
    assert widget.list_widget.isHidden()
    assert not widget.empty_label.isHidden()
    assert widget.empty_label.text() == "No matching items"
    controller.shutdown()


def test_section_headers_are_not_selectable():
    sections = [
        QuickPickItemSection("File", [QuickPickItem("Open File")]),
        QuickPickItemSection("View", [QuickPickItem("Toggle Terminal")]),
    ]
    controller, widget = _widget(sections)
    assert widget.list_widget.count() == 4
    assert widget.list_widget.item(0).flags() == Qt.NoItemFlags
    assert widget.list_widget.currentRow() == 1
    controller.session.set_active_index(1)
    assert widget.list_widget.currentRow() == 3
    controller.shutdown()


def test_arrow_key_in_query_box_moves_active_row(palette_items):
    controller, widget = _widget(palette_items)
    event = QKeyEvent(QEvent.KeyPress, Qt.Key_Down, Qt.NoModifier)
    assert key_event_chord_text(event) == "Down"
    QApplication.sendEvent(widget.query_edit, event)
    assert controller.session.active_index == 1
    assert widget.list_widget.currentRow() == 1
    controller.shutdown()


def test_footer_hints_and_title(palette_items):
    controller, widget = _widget(palette_items, {"title": "Commands", "step": 1, "total_steps": 2, "canSelectMany": True})
    assert widget.title_label.text() == "Commands (1/2)"
    assert "Space toggle" in widget.hints_label.text()
    assert "Enter confirm" in widget.hints_label.text()
    controller.shutdown()
