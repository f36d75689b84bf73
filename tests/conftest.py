import os
import sys

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6.QtWidgets import QApplication  # noqa: E402

from quickpick.core.items import QuickPickItem  # noqa: E402

# Ensure QApplication exists before any QObject/QTimer is created.
qapp = QApplication.instance()
if not qapp:
    qapp = QApplication(sys.argv)


@pytest.fixture
def palette_items():
    return [
        QuickPickItem("Open File"),
        QuickPickItem("Open Folder"),
        QuickPickItem("Close Window"),
    ]


@pytest.fixture
def labels():
    def _labels(ranked):
        return [entry.item.label for entry in ranked]

    return _labels
