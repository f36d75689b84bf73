from __future__ import annotations

import html
from dataclasses import dataclass
from typing import Iterable

HIGHLIGHT_CLASS = "quick-input-highlight"


@dataclass(frozen=True, slots=True)
class TextSegment:
    text: str
    matched: bool = False


def highlight_segments(text: str, matches: Iterable[int]) -> list[TextSegment]:
    source = str(text or "")
    wanted = {int(i) for i in matches or () if 0 <= int(i) < len(source)}
    if not wanted:
        return [TextSegment(source, False)]

    segments: list[TextSegment] = []
    start = 0
    current = 0 in wanted
    for index in range(1, len(source)):
        flag = index in wanted
        if flag == current:
            continue
        segments.append(TextSegment(source[start:index], current))
        start = index
        current = flag
    segments.append(TextSegment(source[start:], current))
    return segments


def segments_to_html(
    segments: Iterable[TextSegment],
    *,
    highlight_color: str = "",
    highlight_class: str = HIGHLIGHT_CLASS,
) -> str:
    parts: list[str] = []
    for segment in segments:
        escaped = html.escape(segment.text)
        if not segment.matched:
            parts.append(escaped)
            continue
        style = f"font-weight:600;color:{highlight_color};" if highlight_color else "font-weight:600;"
        parts.append(f'<span class="{highlight_class}" style="{style}">{escaped}</span>')
    return "".join(parts)


__all__ = ["HIGHLIGHT_CLASS", "TextSegment", "highlight_segments", "segments_to_html"]
