"""Tests for suggestion bubble placement."""

from __future__ import annotations

from noteflow.suggestions.bubble import (
    BUBBLE_SIZE,
    BubbleGeometry,
    BubblePositioner,
    Point,
    Rect,
    Size,
    caret_anchor,
    highlight_matches,
    place,
)

VIEWPORT = Rect(0, 0, 1000, 800)


def test_bubble_sits_below_right_of_caret() -> None:
    assert place(Point(100, 100), BUBBLE_SIZE, VIEWPORT) == Point(108, 108)


def test_right_edge_overflow_shifts_left_with_margin() -> None:
    assert place(Point(900, 100), BUBBLE_SIZE, VIEWPORT) == Point(710, 108)


def test_bottom_overflow_flips_above_caret() -> None:
    assert place(Point(100, 700), BUBBLE_SIZE, VIEWPORT) == Point(108, 450)


def test_flip_that_crosses_the_top_is_clamped() -> None:
    short = Rect(0, 0, 1000, 200)

    assert place(Point(100, 100), BUBBLE_SIZE, short) == Point(108, 10)


def test_narrow_viewport_clamps_to_left_margin() -> None:
    narrow = Rect(0, 0, 200, 800)

    assert place(Point(0, 0), BUBBLE_SIZE, narrow) == Point(10, 10)


def test_offset_viewport_is_respected() -> None:
    scrolled = Rect(0, 500, 1000, 800)

    assert place(Point(100, 480), Size(100, 100), scrolled) == Point(108, 510)


def test_caret_anchor_uses_caret_box_or_editor_inset() -> None:
    editor = Rect(10, 20, 500, 500)

    assert caret_anchor(Rect(50, 60, 0, 18), editor) == Point(50, 88)
    assert caret_anchor(Rect(0, 0, 0, 0), editor) == Point(26, 60)
    assert caret_anchor(None, editor) == Point(26, 60)


def test_anchor_for_combines_anchor_and_placement() -> None:
    geometry = BubbleGeometry(
        editor_rect=Rect(0, 0, 800, 600),
        viewport=VIEWPORT,
        caret_rect=Rect(100, 100, 1, 20),
    )

    assert BubblePositioner().anchor_for(geometry) == Point(108, 138)


def test_highlight_matches_is_case_insensitive() -> None:
    assert highlight_matches("Cat", "ca") == [("Ca", True), ("t", False)]
    assert highlight_matches("banana", "an") == [
        ("b", False),
        ("an", True),
        ("an", True),
        ("a", False),
    ]
    assert highlight_matches("dog", "") == [("dog", False)]
