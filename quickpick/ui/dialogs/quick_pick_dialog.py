from __future__ import annotations

import dataclasses
from typing import Any, Mapping

from PySide6.QtCore import QEvent, Qt
from PySide6.QtWidgets import QDialog, QVBoxLayout, QWidget

from quickpick.core.items import ItemsInput, QuickPickItem
from quickpick.core.session import ItemProvider
from quickpick.settings_schema import QuickPickOptions
from quickpick.ui.controllers.quick_pick_controller import QuickPickController
from quickpick.ui.widgets.quick_pick_widget import QuickPickWidget


class QuickPickDialog(QDialog):
    BackResult = 2

    def __init__(
        self,
        *,
        items: ItemsInput | None = None,
        provider: ItemProvider | None = None,
        options: QuickPickOptions | Mapping[str, Any] | None = None,
        keybindings: Mapping[str, list[str]] | None = None,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.setWindowFlags(Qt.WindowType.Dialog | Qt.WindowType.FramelessWindowHint)
        self.setObjectName("QuickPickDialog")
        self.resize(600, 440)

        self.controller = QuickPickController(
            items=items,
            provider=provider,
            options=options,
            keybindings=keybindings,
            parent=self,
        )
        self.options = self.controller.options
        self.setWindowTitle(self.options.title_text() or "Quick Pick")

        self._selected_item: QuickPickItem[Any] | None = None
        self._selected_items: list[QuickPickItem[Any]] = []

        lay = QVBoxLayout(self)
        lay.setContentsMargins(0, 0, 0, 0)
        self.picker = QuickPickWidget(self.controller, self)
        lay.addWidget(self.picker)

        self.controller.itemSelected.connect(self._on_item_selected)
        self.controller.itemsSelected.connect(self._on_items_selected)
        self.controller.closed.connect(self.reject)
        self.controller.backRequested.connect(lambda: self.done(self.BackResult))

    def selected_item(self) -> QuickPickItem[Any] | None:
        return self._selected_item

    def selected_items(self) -> list[QuickPickItem[Any]]:
        return list(self._selected_items)

    def showEvent(self, event) -> None:
        super().showEvent(event)
        self.controller.open()
        self.picker.query_edit.setFocus(Qt.PopupFocusReason)
        self.picker.query_edit.selectAll()

    def changeEvent(self, event: QEvent) -> None:
        super().changeEvent(event)
        if event.type() != QEvent.ActivationChange:
            return
        if self.isVisible() and not self.isActiveWindow() and not self.options.ignore_focus_out:
            self.controller.close()

    def done(self, result: int) -> None:
        self.controller.shutdown()
        super().done(result)

    def _on_item_selected(self, item: QuickPickItem[Any]) -> None:
        self._selected_item = item
        self.accept()

    def _on_items_selected(self, items: list) -> None:
        self._selected_items = list(items)
        self.accept()

    @classmethod
    def pick_one(
        cls,
        *,
        items: ItemsInput | None = None,
        provider: ItemProvider | None = None,
        options: QuickPickOptions | Mapping[str, Any] | None = None,
        keybindings: Mapping[str, list[str]] | None = None,
        parent: QWidget | None = None,
    ) -> tuple[QuickPickItem[Any] | None, bool]:
        dialog = cls(items=items, provider=provider, options=options, keybindings=keybindings, parent=parent)
        if dialog.exec() != QDialog.Accepted:
            return None, False
        return dialog.selected_item(), True

    @classmethod
    def pick_many(
        cls,
        *,
        items: ItemsInput | None = None,
        provider: ItemProvider | None = None,
        options: QuickPickOptions | Mapping[str, Any] | None = None,
        keybindings: Mapping[str, list[str]] | None = None,
        parent: QWidget | None = None,
    ) -> tuple[list[QuickPickItem[Any]], bool]:
        if isinstance(options, QuickPickOptions):
            options = dataclasses.replace(options, can_select_many=True)
        else:
            options = {**dict(options or {}), "can_select_many": True}
        dialog = cls(items=items, provider=provider, options=options, keybindings=keybindings, parent=parent)
        if dialog.exec() != QDialog.Accepted:
            return [], False
        return dialog.selected_items(), True


__all__ = ["QuickPickDialog"]
