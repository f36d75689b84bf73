"""Qt-aware controllers used by the picker widgets."""

from .quick_pick_controller import QuickPickController

__all__ = [
    "QuickPickController",
]
