import logging
import sys
import time

from PySide6.QtWidgets import QApplication

from quickpick.core.items import QuickPickItem, QuickPickItemButton, QuickPickItemSection
from quickpick.ui.dialogs.quick_pick_dialog import QuickPickDialog

MANY_ARG = "--many"
ASYNC_ARG = "--async"
WIZARD_ARG = "--wizard"


def _split_startup_args(argv: list[str]) -> tuple[list[str], set[str]]:
    filtered: list[str] = []
    flags: set[str] = set()
    for arg in argv:
        if arg in {MANY_ARG, ASYNC_ARG, WIZARD_ARG}:
            flags.add(arg)
            continue
        filtered.append(arg)
    return filtered, flags


def _demo_sections() -> list[QuickPickItemSection]:
    return [
        QuickPickItemSection(
            "File",
            [
                QuickPickItem("Open File", description="Ctrl+O", data="action.open_file"),
                QuickPickItem("Open Folder", description="Ctrl+K Ctrl+O", data="action.open_folder"),
                QuickPickItem("Save All", description="Ctrl+Alt+S", data="action.save_all"),
            ],
        ),
        QuickPickItemSection(
            "View",
            [
                QuickPickItem("Toggle Terminal", description="Ctrl+`", data="action.toggle_terminal"),
                QuickPickItem(
                    "Close Window",
                    detail="Closes the active window",
                    data="action.close_window",
                    buttons=(QuickPickItemButton("pin", tooltip="Pin command"),),
                ),
                QuickPickItem("Show Problems", always_show=True, data="action.show_problems"),
            ],
        ),
    ]


def _demo_provider(query: str) -> list[QuickPickItem]:
    time.sleep(0.25)
    words = ["settings.json", "main.py", "quick_pick_widget.py", "README.md", "pyproject.toml"]
    return [QuickPickItem(word, description=f"/workspace/{word}") for word in words if query.lower() in word.lower()]


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    cli_args, flags = _split_startup_args(sys.argv[1:])
    app = QApplication([sys.argv[0], *cli_args])
    app.setStyle("Fusion")
    app.setApplicationName("PyTPO Quick Pick")

    options = {
        "title": "Command Palette",
        "placeholder": "Type a command",
        "match_on_description": True,
        "match_on_detail": True,
        "can_select_many": MANY_ARG in flags,
        "is_wizard_step": WIZARD_ARG in flags,
        "can_go_back": WIZARD_ARG in flags,
        "show_back_button": WIZARD_ARG in flags,
        "step": 2 if WIZARD_ARG in flags else 0,
        "total_steps": 3 if WIZARD_ARG in flags else 0,
    }
    if ASYNC_ARG in flags:
        dialog = QuickPickDialog(provider=_demo_provider, options=options)
    else:
        dialog = QuickPickDialog(items=_demo_sections(), options=options)
    dialog.controller.itemButtonClicked.connect(lambda item, button: print(f"button {button} on {item.label}"))
    result = dialog.exec()
    if result == QuickPickDialog.BackResult:
        print("back")
    elif dialog.selected_items():
        print([item.label for item in dialog.selected_items()])
    elif dialog.selected_item() is not None:
        print(dialog.selected_item().label)
    sys.exit(0)
