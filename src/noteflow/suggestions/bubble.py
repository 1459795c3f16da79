"""Placement of the suggestion bubble next to the caret."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Tuple

__all__ = [
    "BUBBLE_SIZE",
    "BubbleGeometry",
    "BubblePositioner",
    "Point",
    "Rect",
    "Size",
    "caret_anchor",
    "highlight_matches",
    "place",
]

CARET_OFFSET = (8, 8)
EDGE_MARGIN = 10
CARET_GAP = 10
EMPTY_CARET_INSET = (16, 40)


@dataclass(slots=True, frozen=True)
class Point:
    x: float
    y: float


@dataclass(slots=True, frozen=True)
class Size:
    width: float
    height: float


@dataclass(slots=True, frozen=True)
class Rect:
    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 and self.height <= 0


BUBBLE_SIZE = Size(280, 240)


@dataclass(slots=True, frozen=True)
class BubbleGeometry:
    """Host measurements needed to position the bubble."""

    editor_rect: Rect
    viewport: Rect
    caret_rect: Rect | None = None


class BubblePositioner:
    """Keeps the bubble inside the viewport.

    The bubble starts just below and right of the caret. It is pushed left
    when it would overflow the right edge and flipped above the caret when it
    would overflow the bottom. The top and left edges are hard limits; when
    the flip would cross the top the bubble overlaps the caret instead of
    being hidden.
    """

    def __init__(self, *, margin: float = EDGE_MARGIN) -> None:
        self._margin = margin

    def place(self, caret_point: Point, bubble_size: Size, viewport: Rect) -> Point:
        margin = self._margin
        x = caret_point.x + CARET_OFFSET[0]
        y = caret_point.y + CARET_OFFSET[1]

        if x + bubble_size.width > viewport.right - margin:
            x = viewport.right - bubble_size.width - margin
        x = max(x, viewport.left + margin)

        if y + bubble_size.height > viewport.bottom:
            y = caret_point.y - bubble_size.height - CARET_GAP
        y = max(y, viewport.top + margin)
        return Point(x, y)

    def caret_anchor(self, caret_rect: Rect | None, editor_rect: Rect) -> Point:
        """Return the point the bubble hangs from.

        That is just under the caret's line box, or a fixed inset from the
        editor's corner when the caret has no box (e.g. an empty line).
        """

        if caret_rect is None or caret_rect.is_empty:
            return Point(editor_rect.left + EMPTY_CARET_INSET[0], editor_rect.top + EMPTY_CARET_INSET[1])
        return Point(caret_rect.left, caret_rect.bottom + CARET_GAP)

    def anchor_for(self, geometry: BubbleGeometry, bubble_size: Size = BUBBLE_SIZE) -> Point:
        return self.place(self.caret_anchor(geometry.caret_rect, geometry.editor_rect), bubble_size, geometry.viewport)


def place(caret_point: Point, bubble_size: Size, viewport: Rect) -> Point:
    return BubblePositioner().place(caret_point, bubble_size, viewport)


def caret_anchor(caret_rect: Rect | None, editor_rect: Rect) -> Point:
    return BubblePositioner().caret_anchor(caret_rect, editor_rect)


def highlight_matches(suggestion: str, word: str) -> List[Tuple[str, bool]]:
    """Split ``suggestion`` into ``(text, matched)`` parts, matching ``word`` case-insensitively."""

    if not word:
        return [(suggestion, False)]
    parts: List[Tuple[str, bool]] = []
    cursor = 0
    for match in re.finditer(re.escape(word), suggestion, flags=re.IGNORECASE):
        if match.start() > cursor:
            parts.append((suggestion[cursor : match.start()], False))
        parts.append((match.group(0), True))
        cursor = match.end()
    if cursor < len(suggestion):
        parts.append((suggestion[cursor:], False))
    return parts
