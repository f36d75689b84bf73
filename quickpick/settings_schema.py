from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TypedDict

from quickpick.core.items import ItemActivation
from quickpick.core.ranker import FilterOverride, RankFlags


DEFAULT_DEBOUNCE_MS = 150
DEFAULT_NO_RESULTS_MESSAGE = "No matching items"

ITEM_ACTIVATION_NAMES = {
    "first": ItemActivation.FIRST,
    "second": ItemActivation.SECOND,
    "last": ItemActivation.LAST,
}

# Option names as host applications written against the web picker spell them.
_CAMEL_ALIASES = {
    "canSelectMany": "can_select_many",
    "matchOnDescription": "match_on_description",
    "matchOnDetail": "match_on_detail",
    "sortByLabel": "sort_by_label",
    "debounceMs": "debounce_ms",
    "itemProviderDebounce": "debounce_ms",
    "noResultsMessage": "no_results_message",
    "isWizardStep": "is_wizard_step",
    "canGoBack": "can_go_back",
    "showBackButton": "show_back_button",
    "ignoreFocusOut": "ignore_focus_out",
    "totalSteps": "total_steps",
    "helpText": "help_text",
    "itemActivation": "item_activation",
}


class QuickPickSettings(TypedDict, total=False):
    placeholder: str
    title: str
    can_select_many: bool
    match_on_description: bool
    match_on_detail: bool
    sort_by_label: bool
    debounce_ms: int
    no_results_message: str
    is_wizard_step: bool
    can_go_back: bool
    show_back_button: bool
    ignore_focus_out: bool
    value: str
    step: int
    total_steps: int
    help_text: str
    item_activation: str


def default_quickpick_settings() -> QuickPickSettings:
    return {
        "placeholder": "",
        "title": "",
        "can_select_many": False,
        "match_on_description": False,
        "match_on_detail": False,
        "sort_by_label": False,
        "debounce_ms": DEFAULT_DEBOUNCE_MS,
        "no_results_message": "",
        "is_wizard_step": False,
        "can_go_back": False,
        "show_back_button": False,
        "ignore_focus_out": False,
        "value": "",
        "step": 0,
        "total_steps": 0,
        "help_text": "",
        "item_activation": "first",
    }


def _activation_name(value: Any, fallback: str) -> str:
    if isinstance(value, ItemActivation):
        return value.name.lower()
    if isinstance(value, int) and not isinstance(value, bool):
        for name, member in ITEM_ACTIVATION_NAMES.items():
            if int(member) == value:
                return name
        return fallback
    text = str(value or "").strip().lower()
    return text if text in ITEM_ACTIVATION_NAMES else fallback


def normalize_quickpick_settings(raw: Any) -> QuickPickSettings:
    defaults = default_quickpick_settings()
    data: dict[str, Any] = dict(defaults)
    if isinstance(raw, dict):
        for key, value in raw.items():
            name = str(key)
            data[_CAMEL_ALIASES.get(name, name)] = value

    def _clamp_int(value: Any, low: int, high: int, fallback: int) -> int:
        try:
            return max(low, min(high, int(value)))
        except Exception:
            return fallback

    def _text(key: str) -> str:
        value = data.get(key, defaults[key])
        return str(value if value is not None else "")

    return {
        "placeholder": _text("placeholder").strip(),
        "title": _text("title").strip(),
        "can_select_many": bool(data.get("can_select_many", defaults["can_select_many"])),
        "match_on_description": bool(data.get("match_on_description", defaults["match_on_description"])),
        "match_on_detail": bool(data.get("match_on_detail", defaults["match_on_detail"])),
        "sort_by_label": bool(data.get("sort_by_label", defaults["sort_by_label"])),
        "debounce_ms": _clamp_int(data.get("debounce_ms"), 0, 5000, int(defaults["debounce_ms"])),
        "no_results_message": _text("no_results_message").strip(),
        "is_wizard_step": bool(data.get("is_wizard_step", defaults["is_wizard_step"])),
        "can_go_back": bool(data.get("can_go_back", defaults["can_go_back"])),
        "show_back_button": bool(data.get("show_back_button", defaults["show_back_button"])),
        "ignore_focus_out": bool(data.get("ignore_focus_out", defaults["ignore_focus_out"])),
        "value": _text("value"),
        "step": _clamp_int(data.get("step"), 0, 999, int(defaults["step"])),
        "total_steps": _clamp_int(data.get("total_steps"), 0, 999, int(defaults["total_steps"])),
        "help_text": _text("help_text").strip(),
        "item_activation": _activation_name(data.get("item_activation"), str(defaults["item_activation"])),
    }


@dataclass(slots=True)
class QuickPickOptions:
    placeholder: str = ""
    title: str = ""
    can_select_many: bool = False
    match_on_description: bool = False
    match_on_detail: bool = False
    sort_by_label: bool = False
    debounce_ms: int = DEFAULT_DEBOUNCE_MS
    no_results_message: str = ""
    is_wizard_step: bool = False
    can_go_back: bool = False
    show_back_button: bool = False
    ignore_focus_out: bool = False
    value: str = ""
    step: int = 0
    total_steps: int = 0
    help_text: str = ""
    item_activation: ItemActivation = ItemActivation.FIRST
    filter_override: FilterOverride | None = None

    @classmethod
    def from_mapping(cls, data: Any, *, filter_override: FilterOverride | None = None) -> "QuickPickOptions":
        n = normalize_quickpick_settings(data)
        if filter_override is None and isinstance(data, dict):
            candidate = data.get("filter_override", data.get("filter"))
            if callable(candidate):
                filter_override = candidate
        return cls(
            placeholder=str(n["placeholder"]),
            title=str(n["title"]),
            can_select_many=bool(n["can_select_many"]),
            match_on_description=bool(n["match_on_description"]),
            match_on_detail=bool(n["match_on_detail"]),
            sort_by_label=bool(n["sort_by_label"]),
            debounce_ms=int(n["debounce_ms"]),
            no_results_message=str(n["no_results_message"]),
            is_wizard_step=bool(n["is_wizard_step"]),
            can_go_back=bool(n["can_go_back"]),
            show_back_button=bool(n["show_back_button"]),
            ignore_focus_out=bool(n["ignore_focus_out"]),
            value=str(n["value"]),
            step=int(n["step"]),
            total_steps=int(n["total_steps"]),
            help_text=str(n["help_text"]),
            item_activation=ITEM_ACTIVATION_NAMES[str(n["item_activation"])],
            filter_override=filter_override,
        )

    @property
    def back_enabled(self) -> bool:
        return self.is_wizard_step and self.can_go_back

    def rank_flags(self) -> RankFlags:
        return RankFlags(
            match_on_description=self.match_on_description,
            match_on_detail=self.match_on_detail,
            filter_override=self.filter_override,
            sort_by_label=self.sort_by_label,
        )

    def title_text(self) -> str:
        title = self.title
        if self.step > 0 and self.total_steps > 0:
            suffix = f"{self.step}/{self.total_steps}"
            return f"{title} ({suffix})" if title else suffix
        return title


__all__ = [
    "DEFAULT_DEBOUNCE_MS",
    "DEFAULT_NO_RESULTS_MESSAGE",
    "QuickPickSettings",
    "default_quickpick_settings",
    "normalize_quickpick_settings",
    "QuickPickOptions",
]
