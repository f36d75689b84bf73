from .quick_pick_dialog import QuickPickDialog

__all__ = [
    "QuickPickDialog",
]
