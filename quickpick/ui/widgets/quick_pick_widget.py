from __future__ import annotations

import html
from typing import Any

from PySide6.QtCore import QEvent, QObject, Qt, Signal
from PySide6.QtGui import QKeyEvent, QKeySequence
from PySide6.QtWidgets import (
    QAbstractItemView,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QPushButton,
    QToolButton,
    QVBoxLayout,
    QWidget,
)

from quickpick.core.highlighter import highlight_segments, segments_to_html
from quickpick.core.items import QuickPickItem, RankedItem, ranges_to_indices
from quickpick.core.keybindings import footer_hints
from quickpick.ui.controllers.quick_pick_controller import QuickPickController

HIGHLIGHT_COLOR = "#4fa3ff"
MUTED_COLOR = "#8b8b8b"


def key_event_chord_text(event: QKeyEvent) -> str:
    return QKeySequence(event.keyCombination()).toString(QKeySequence.PortableText)


def _field_html(text: str, matches: tuple[int, ...], custom_ranges=()) -> str:
    indices = matches or ranges_to_indices(custom_ranges)
    return segments_to_html(highlight_segments(text, indices), highlight_color=HIGHLIGHT_COLOR)


class _QuickPickRow(QWidget):
    buttonTriggered = Signal(str)

    def __init__(self, ranked: RankedItem[Any], *, picked: bool | None, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        item = ranked.item
        match = ranked.match
        highlights = item.highlights

        lay = QHBoxLayout(self)
        lay.setContentsMargins(8, 3, 8, 3)
        lay.setSpacing(6)

        if picked is not None:
            self.check_label = QLabel("☑" if picked else "☐", self)
            lay.addWidget(self.check_label)

        text_host = QWidget(self)
        text_lay = QVBoxLayout(text_host)
        text_lay.setContentsMargins(0, 0, 0, 0)
        text_lay.setSpacing(0)

        title = _field_html(item.label, match.label_matches, highlights.label if highlights else ())
        if item.description:
            desc = _field_html(item.description, match.description_matches, highlights.description if highlights else ())
            title += f'&nbsp;&nbsp;<span style="color:{MUTED_COLOR};">{desc}</span>'
        self.title_label = QLabel(title, text_host)
        self.title_label.setTextFormat(Qt.RichText)
        text_lay.addWidget(self.title_label)

        if item.detail:
            detail = _field_html(item.detail, match.detail_matches, highlights.detail if highlights else ())
            self.detail_label = QLabel(f'<span style="color:{MUTED_COLOR};">{detail}</span>', text_host)
            self.detail_label.setTextFormat(Qt.RichText)
            text_lay.addWidget(self.detail_label)

        lay.addWidget(text_host, 1)

        for button in item.buttons:
            btn = QToolButton(self)
            btn.setText(button.button_id)
            btn.setToolTip(button.tooltip or button.button_id)
            btn.setAutoRaise(True)
            btn.clicked.connect(lambda _checked=False, bid=button.button_id: self.buttonTriggered.emit(bid))
            lay.addWidget(btn)


class QuickPickWidget(QWidget):
    """Query box, highlighted result list and footer for one picker session."""

    def __init__(self, controller: QuickPickController, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.controller = controller
        self.options = controller.options
        self._row_by_selectable: list[int] = []
        self._item_by_row: dict[int, QuickPickItem[Any]] = {}
        self._syncing = False

        root = QVBoxLayout(self)
        root.setContentsMargins(6, 6, 6, 6)
        root.setSpacing(4)

        header = QHBoxLayout()
        header.setContentsMargins(0, 0, 0, 0)
        self.back_button = QPushButton("←", self)
        self.back_button.setFixedWidth(28)
        self.back_button.setVisible(self.options.show_back_button)
        self.back_button.setEnabled(self.options.can_go_back)
        self.back_button.clicked.connect(lambda: self.controller.trigger_action("back"))
        header.addWidget(self.back_button)
        self.title_label = QLabel(self.options.title_text(), self)
        self.title_label.setStyleSheet("font-weight: bold;")
        self.title_label.setVisible(bool(self.options.title_text()))
        header.addWidget(self.title_label, 1)
        self.busy_label = QLabel("Loading...", self)
        self.busy_label.setVisible(False)
        header.addWidget(self.busy_label)
        root.addLayout(header)

        self.query_edit = QLineEdit(self)
        self.query_edit.setPlaceholderText(self.options.placeholder)
        self.query_edit.setText(self.controller.session.query)
        self.query_edit.setClearButtonEnabled(True)
        self.query_edit.textChanged.connect(self._on_text_changed)
        self.query_edit.installEventFilter(self)
        root.addWidget(self.query_edit)

        self.help_label = QLabel(self.options.help_text, self)
        self.help_label.setWordWrap(True)
        self.help_label.setStyleSheet(f"color: {MUTED_COLOR};")
        self.help_label.setVisible(bool(self.options.help_text))
        root.addWidget(self.help_label)

        self.list_widget = QListWidget(self)
        self.list_widget.setSelectionMode(QAbstractItemView.SingleSelection)
        self.list_widget.setMouseTracking(True)
        self.list_widget.setFocusPolicy(Qt.NoFocus)
        self.list_widget.itemEntered.connect(self._on_item_entered)
        self.list_widget.itemClicked.connect(self._on_item_clicked)
        root.addWidget(self.list_widget, 1)

        self.empty_label = QLabel("", self)
        self.empty_label.setAlignment(Qt.AlignCenter)
        self.empty_label.setStyleSheet(f"color: {MUTED_COLOR}; padding: 16px;")
        root.addWidget(self.empty_label)

        footer = QHBoxLayout()
        footer.setContentsMargins(0, 0, 0, 0)
        self.hints_label = QLabel(self._hints_text(), self)
        self.hints_label.setStyleSheet(f"color: {MUTED_COLOR};")
        footer.addWidget(self.hints_label, 1)
        self.status_label = QLabel("", self)
        self.status_label.setStyleSheet(f"color: {MUTED_COLOR};")
        footer.addWidget(self.status_label)
        root.addLayout(footer)

        controller.viewChanged.connect(self.refresh)
        controller.activeIndexChanged.connect(self._sync_active_row)
        controller.busyChanged.connect(self._on_busy_changed)

        self.refresh()

    # ---------- Rendering ----------

    def _hints_text(self) -> str:
        return "   ".join(f"{keys} {label}" for keys, label in footer_hints(self.options))

    def refresh(self) -> None:
        session = self.controller.session
        many = self.options.can_select_many
        self._syncing = True
        try:
            self.list_widget.clear()
            self._row_by_selectable = []
            self._item_by_row = {}
            for row, ranked in enumerate(session.ranked):
                item = ranked.item
                list_item = QListWidgetItem(self.list_widget)
                if item.is_separator:
                    list_item.setFlags(Qt.NoItemFlags)
                    header = QLabel(html.escape(item.label), self.list_widget)
                    header.setStyleSheet(f"color: {MUTED_COLOR}; font-size: 11px; padding: 4px 8px 0 8px;")
                    list_item.setSizeHint(header.sizeHint())
                    self.list_widget.setItemWidget(list_item, header)
                    continue
                self._row_by_selectable.append(row)
                self._item_by_row[row] = item
                row_widget = _QuickPickRow(
                    ranked,
                    picked=session.is_picked(item) if many else None,
                    parent=self.list_widget,
                )
                row_widget.buttonTriggered.connect(
                    lambda button_id, it=item: self.controller.trigger_item_button(it, button_id)
                )
                list_item.setSizeHint(row_widget.sizeHint())
                self.list_widget.setItemWidget(list_item, row_widget)
        finally:
            self._syncing = False

        has_rows = bool(session.ranked)
        self.list_widget.setVisible(has_rows)
        self.empty_label.setVisible(not has_rows)
        self.empty_label.setText(session.no_results_text())
        self.status_label.setText(session.status_text())
        self.busy_label.setVisible(session.busy)
        self._sync_active_row(session.active_index)

    def _sync_active_row(self, selectable_index: int) -> None:
        if selectable_index < 0 or selectable_index >= len(self._row_by_selectable):
            self.list_widget.setCurrentRow(-1)
            return
        row = self._row_by_selectable[selectable_index]
        self._syncing = True
        try:
            self.list_widget.setCurrentRow(row)
            current = self.list_widget.item(row)
            if current is not None:
                self.list_widget.scrollToItem(current, QAbstractItemView.EnsureVisible)
        finally:
            self._syncing = False

    def _on_busy_changed(self, busy: bool) -> None:
        self.busy_label.setVisible(bool(busy))
        if not self.controller.session.ranked:
            self.empty_label.setText(self.controller.session.no_results_text())

    # ---------- Input ----------

    def _on_text_changed(self, text: str) -> None:
        self.controller.set_query(text)

    def _selectable_index_for_row(self, row: int) -> int:
        try:
            return self._row_by_selectable.index(row)
        except ValueError:
            return -1

    def _on_item_entered(self, list_item: QListWidgetItem) -> None:
        if self._syncing:
            return
        index = self._selectable_index_for_row(self.list_widget.row(list_item))
        if index >= 0:
            self.controller.set_active_index(index)

    def _on_item_clicked(self, list_item: QListWidgetItem) -> None:
        item = self._item_by_row.get(self.list_widget.row(list_item))
        if item is not None:
            self.controller.activate_item(item)

    def eventFilter(self, watched: QObject, event: QEvent) -> bool:
        if watched is self.query_edit and event.type() == QEvent.KeyPress:
            if self.controller.handle_chord(key_event_chord_text(event)):
                return True
        return super().eventFilter(watched, event)


__all__ = ["QuickPickWidget", "key_event_chord_text"]
