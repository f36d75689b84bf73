from quickpick.core.highlighter import TextSegment, highlight_segments, segments_to_html
from quickpick.core.items import ranges_to_indices


def test_partitions_at_match_boundaries():
    assert highlight_segments("FooBar", (0, 3)) == [
        TextSegment("F", True),
        TextSegment("oo", False),
        TextSegment("B", True),
        TextSegment("ar", False),
    ]


def test_adjacent_matches_merge():
    assert highlight_segments("abc", [0, 1]) == [TextSegment("ab", True), TextSegment("c", False)]


def test_match_at_end():
    assert highlight_segments("abc", [2]) == [TextSegment("ab", False), TextSegment("c", True)]


def test_no_matches_yields_whole_text():
    assert highlight_segments("Open File", ()) == [TextSegment("Open File", False)]
    assert highlight_segments("", ()) == [TextSegment("", False)]


def test_out_of_range_indices_are_ignored():
    assert highlight_segments("ab", [5, -1]) == [TextSegment("ab", False)]


def test_segments_concatenate_to_source():
    text = "quick_pick_widget.py"
    segments = highlight_segments(text, [0, 6, 11, 12])
    assert "".join(s.text for s in segments) == text


def test_html_escapes_text():
    html_text = segments_to_html(highlight_segments("<a>", [1]))
    assert "&lt;" in html_text
    assert '<span class="quick-input-highlight"' in html_text
    assert "<a>" not in html_text


def test_custom_ranges_expand_to_indices():
    assert ranges_to_indices([(0, 2), (5, 5), (4, 3)]) == (0, 1, 2, 3, 4, 5)
    assert ranges_to_indices([(-2, 0)]) == (0,)
    assert ranges_to_indices([]) == ()
