"""Picker keyboard contract: actions, default chords, normalization, conflicts."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

from PySide6.QtGui import QKeySequence


class PickerAction(str, Enum):
    NEXT = "next"
    PREVIOUS = "previous"
    FIRST = "first"
    LAST = "last"
    PAGE_FORWARD = "page_forward"
    PAGE_BACKWARD = "page_backward"
    CYCLE_FORWARD = "cycle_forward"
    CYCLE_BACKWARD = "cycle_backward"
    TOGGLE = "toggle"
    ACCEPT = "accept"
    CANCEL = "cancel"
    BACK = "back"


@dataclass(frozen=True, slots=True)
class KeybindingAction:
    action: PickerAction
    action_name: str
    default_sequence: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class KeybindingConflict:
    action: PickerAction
    action_name: str
    chord_text: str


KEYBINDING_ACTIONS: tuple[KeybindingAction, ...] = (
    KeybindingAction(PickerAction.NEXT, "Next Item", ("Down",)),
    KeybindingAction(PickerAction.PREVIOUS, "Previous Item", ("Up",)),
    KeybindingAction(PickerAction.FIRST, "First Item", ("Home",)),
    KeybindingAction(PickerAction.LAST, "Last Item", ("End",)),
    KeybindingAction(PickerAction.PAGE_FORWARD, "Page Down", ("PgDown",)),
    KeybindingAction(PickerAction.PAGE_BACKWARD, "Page Up", ("PgUp",)),
    KeybindingAction(PickerAction.CYCLE_FORWARD, "Cycle Forward", ("Tab",)),
    # Qt reports Shift+Tab as Backtab with the Shift modifier held.
    KeybindingAction(PickerAction.CYCLE_BACKWARD, "Cycle Backward", ("Shift+Tab", "Shift+Backtab")),
    KeybindingAction(PickerAction.TOGGLE, "Toggle Item", ("Space",)),
    KeybindingAction(PickerAction.ACCEPT, "Accept", ("Return", "Enter")),
    KeybindingAction(PickerAction.CANCEL, "Close", ("Esc",)),
    KeybindingAction(PickerAction.BACK, "Back", ("Alt+Left",)),
)

_ACTION_BY_ID: dict[PickerAction, KeybindingAction] = {entry.action: entry for entry in KEYBINDING_ACTIONS}

_KEY_ALIASES = {
    "escape": "Esc",
    "esc": "Esc",
    "pagedown": "PgDown",
    "pgdown": "PgDown",
    "pageup": "PgUp",
    "pgup": "PgUp",
    "arrowdown": "Down",
    "arrowup": "Up",
    "arrowleft": "Left",
    "arrowright": "Right",
    "enter": "Enter",
    "return": "Return",
    "space": "Space",
    " ": "Space",
    "tab": "Tab",
    "backtab": "Backtab",
}


def default_keybindings() -> dict[str, list[str]]:
    return {entry.action.value: list(entry.default_sequence) for entry in KEYBINDING_ACTIONS}


def action_definition(action: PickerAction | str) -> KeybindingAction | None:
    try:
        return _ACTION_BY_ID.get(PickerAction(str(action or "").strip()))
    except ValueError:
        return None


def _manual_canonical_chord(text: str) -> str:
    raw = str(text or "")
    if raw == " ":
        return "Space"
    raw = raw.strip()
    if not raw:
        return ""
    parts = [part.strip() for part in raw.split("+") if part.strip()]
    if raw.endswith("++") or raw == "+":
        parts.append("+")
    if not parts:
        return ""

    has_ctrl = False
    has_alt = False
    has_shift = False
    has_meta = False
    key_token = ""
    for part in parts:
        low = part.lower()
        if low in {"ctrl", "control"}:
            has_ctrl = True
            continue
        if low == "alt":
            has_alt = True
            continue
        if low == "shift":
            has_shift = True
            continue
        if low in {"meta", "cmd", "command", "super", "win"}:
            has_meta = True
            continue
        key_token = part

    if not key_token:
        return ""
    alias = _KEY_ALIASES.get(key_token.lower())
    if alias:
        key_token = alias
    elif len(key_token) == 1 and key_token.isalpha():
        key_token = key_token.upper()
    elif len(key_token) > 1:
        key_token = key_token[0].upper() + key_token[1:]

    out: list[str] = []
    if has_ctrl:
        out.append("Ctrl")
    if has_alt:
        out.append("Alt")
    if has_shift:
        out.append("Shift")
    if has_meta:
        out.append("Meta")
    out.append(key_token)
    return "+".join(out)


def canonicalize_chord_text(text: str) -> str:
    manual = _manual_canonical_chord(text)
    if not manual:
        return ""
    normalized = QKeySequence(manual).toString(QKeySequence.PortableText).strip()
    if not normalized or "," in normalized:
        return manual
    return _manual_canonical_chord(normalized) or manual


def normalize_sequence(value: Any) -> list[str]:
    tokens: list[str] = []
    if isinstance(value, str):
        tokens.extend(part for part in value.split(",") if part.strip())
    elif isinstance(value, (list, tuple)):
        for item in value:
            if isinstance(item, str):
                tokens.extend(part for part in item.split(",") if part.strip())
    normalized: list[str] = []
    for token in tokens:
        chord = canonicalize_chord_text(token)
        if chord and chord not in normalized:
            normalized.append(chord)
    return normalized


def normalize_keybindings(raw: Any) -> dict[str, list[str]]:
    merged = {key: normalize_sequence(value) for key, value in default_keybindings().items()}
    if not isinstance(raw, Mapping):
        return merged
    for action_key, value in raw.items():
        definition = action_definition(action_key)
        if definition is None:
            continue
        normalized = normalize_sequence(value)
        if normalized:
            merged[definition.action.value] = normalized
    return merged


def action_is_enabled(action: PickerAction, options: Any) -> bool:
    if action == PickerAction.TOGGLE:
        return bool(getattr(options, "can_select_many", False))
    if action == PickerAction.BACK:
        return bool(getattr(options, "is_wizard_step", False)) and bool(getattr(options, "can_go_back", False))
    return True


def action_for_chord(
    keybindings: Mapping[str, list[str]] | None,
    chord_text: str,
    options: Any = None,
) -> PickerAction | None:
    chord = canonicalize_chord_text(chord_text)
    if not chord:
        return None
    normalized = normalize_keybindings(keybindings)
    for entry in KEYBINDING_ACTIONS:
        if chord not in normalized.get(entry.action.value, []):
            continue
        if options is not None and not action_is_enabled(entry.action, options):
            continue
        return entry.action
    return None


def sequence_to_text(sequence: list[str] | tuple[str, ...]) -> str:
    return ", ".join(normalize_sequence(list(sequence)))


def find_conflicts(
    keybindings: Mapping[str, list[str]] | None,
    *,
    action: PickerAction | str,
    sequence: list[str],
) -> list[KeybindingConflict]:
    target = action_definition(action)
    wanted = set(normalize_sequence(sequence))
    if target is None or not wanted:
        return []
    normalized = normalize_keybindings(keybindings)
    conflicts: list[KeybindingConflict] = []
    for candidate in KEYBINDING_ACTIONS:
        if candidate.action == target.action:
            continue
        for chord in normalized.get(candidate.action.value, []):
            if chord in wanted:
                conflicts.append(KeybindingConflict(candidate.action, candidate.action_name, chord))
    return conflicts


def footer_hints(options: Any) -> list[tuple[str, str]]:
    """Key hint pairs shown under the list, in display order."""
    many = bool(getattr(options, "can_select_many", False))
    back = action_is_enabled(PickerAction.BACK, options)
    hints = [
        ("↑↓", "navigate"),
        ("Enter", "confirm" if many else "select"),
    ]
    if many:
        hints.append(("Space", "toggle"))
    if back:
        hints.append(("Alt+Left", "back"))
    hints.append(("Esc", "back" if back else "close"))
    return hints


__all__ = [
    "PickerAction",
    "KeybindingAction",
    "KeybindingConflict",
    "KEYBINDING_ACTIONS",
    "default_keybindings",
    "action_definition",
    "canonicalize_chord_text",
    "normalize_sequence",
    "normalize_keybindings",
    "action_is_enabled",
    "action_for_chord",
    "sequence_to_text",
    "find_conflicts",
    "footer_hints",
]
