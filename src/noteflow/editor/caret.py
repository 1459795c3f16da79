"""Save and restore the caret and selection across document mutations."""

from __future__ import annotations

import logging

from ..core.ranges import TextRange
from .document_tree import DocumentTree
from .offsets import OffsetMapper
from .surface import EditorSurface

__all__ = ["CaretController"]

LOGGER = logging.getLogger(__name__)


class CaretController:
    """Bookkeeping of caret and selection state as linear offsets.

    Positions are captured as offsets (which survive restructuring of the
    tree) and re-resolved against whatever tree is current when restored.
    ``restore``/``restore_selection`` never raise; failure is reported only
    through their boolean result.
    """

    def __init__(self, surface: EditorSurface, *, mapper: OffsetMapper | None = None) -> None:
        self._surface = surface
        self._mapper = mapper or OffsetMapper()

    @property
    def mapper(self) -> OffsetMapper:
        return self._mapper

    def save(self, root: DocumentTree) -> int:
        """Return the caret's linear offset (the selection focus), or 0 without one."""

        selection = self._surface.selection
        if selection is None:
            return 0
        return self._mapper.to_linear(root, selection.focus)

    def restore(self, root: DocumentTree, offset: int) -> bool:
        """Collapse the caret at ``offset``, clamping to the end of the document."""

        location = self._mapper.to_tree(root, offset)
        if location is None:
            LOGGER.debug("Caret restore skipped: document has no text runs")
            return False
        try:
            self._surface.set_selection(location)
        except ValueError as exc:
            LOGGER.debug("Caret restore failed at offset %s: %s", offset, exc)
            return False
        return True

    def save_selection(self, root: DocumentTree) -> TextRange | None:
        selection = self._surface.selection
        if selection is None:
            return None
        anchor = self._mapper.to_linear(root, selection.anchor)
        focus = self._mapper.to_linear(root, selection.focus)
        return TextRange(anchor, focus)

    def is_backward(self, root: DocumentTree) -> bool:
        """Return ``True`` when the selection focus lies before its anchor."""

        selection = self._surface.selection
        if selection is None:
            return False
        return self._mapper.to_linear(root, selection.focus) < self._mapper.to_linear(root, selection.anchor)

    def restore_selection(self, root: DocumentTree, selection: TextRange, *, backward: bool = False) -> bool:
        """Re-select ``selection`` using two independent offset lookups.

        With ``backward`` the anchor goes at ``selection.end`` and the focus at
        ``selection.start``, as for a selection dragged right to left.
        """

        start = self._mapper.to_tree(root, selection.start)
        end = self._mapper.to_tree(root, selection.end)
        if start is None or end is None:
            LOGGER.debug("Selection restore skipped: document has no text runs")
            return False
        try:
            if backward:
                self._surface.set_selection(end, start)
            else:
                self._surface.set_selection(start, end)
        except ValueError as exc:
            LOGGER.debug("Selection restore failed for %s: %s", selection.to_tuple(), exc)
            return False
        return True
