"""Headless editing surface standing in for the host's rich-text widget.

The surface owns the current page's :class:`DocumentTree` and a native
selection expressed the way the host reports it: an anchor and a focus
:class:`TreeLocation`. It also performs the host's own editing primitives
(typing, deleting, pasting plain text) so the core can be exercised without a
rendering layer. Everything that reasons in linear offsets goes through the
caret controller and offset mapper instead of poking at the selection here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from .document_tree import DocumentTree, TextRun
from .offsets import OffsetMapper, TreeLocation

__all__ = ["EditorSurface", "NativeSelection", "TextChangeListener"]

LOGGER = logging.getLogger(__name__)


class TextChangeListener(Protocol):
    """Callback invoked whenever the surface content changes."""

    def __call__(self, tree: DocumentTree) -> None:
        ...


@dataclass(slots=True, frozen=True)
class NativeSelection:
    """Selection as held by the host: anchor and focus inside text runs."""

    anchor: TreeLocation
    focus: TreeLocation

    @property
    def is_collapsed(self) -> bool:
        return self.anchor.run is self.focus.run and self.anchor.offset == self.focus.offset


class EditorSurface:
    """In-memory rich-text surface for a single editing session."""

    def __init__(self, tree: DocumentTree | None = None, *, mapper: OffsetMapper | None = None) -> None:
        self._tree = tree if tree is not None else DocumentTree()
        self._mapper = mapper or OffsetMapper()
        self._selection: NativeSelection | None = None
        self._text_listeners: list[TextChangeListener] = []

    # ------------------------------------------------------------------
    # Content accessors
    # ------------------------------------------------------------------
    @property
    def tree(self) -> DocumentTree:
        return self._tree

    def load_html(self, markup: str | None) -> None:
        """Replace the content with parsed ``markup`` and drop the selection."""

        self.replace_tree(DocumentTree.from_html(markup))

    def replace_tree(self, tree: DocumentTree) -> None:
        self._tree = tree
        self._selection = None
        self._emit_text_changed()

    def to_html(self) -> str:
        return self._tree.to_html()

    def text(self) -> str:
        return self._tree.text()

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------
    @property
    def selection(self) -> NativeSelection | None:
        selection = self._selection
        if selection is None:
            return None
        # Runs removed by a mutation leave the native selection dangling.
        if not (self._tree.contains(selection.anchor.run) and self._tree.contains(selection.focus.run)):
            return None
        return selection

    def set_selection(self, anchor: TreeLocation, focus: TreeLocation | None = None) -> None:
        focus = focus or anchor
        for location in (anchor, focus):
            if not self._tree.contains(location.run):
                raise ValueError("selection must point into the current tree")
            if not 0 <= location.offset <= len(location.run.text):
                raise ValueError("selection offset outside its text run")
        self._selection = NativeSelection(anchor, focus)

    def selection_offsets(self) -> tuple[int, int] | None:
        """Return the selection as ordered linear offsets."""

        selection = self.selection
        if selection is None:
            return None
        anchor = self._mapper.to_linear(self._tree, selection.anchor)
        focus = self._mapper.to_linear(self._tree, selection.focus)
        return (min(anchor, focus), max(anchor, focus))

    # ------------------------------------------------------------------
    # Native editing primitives
    # ------------------------------------------------------------------
    def type_text(self, text: str) -> None:
        """Insert ``text`` at the caret the way a keystroke would."""

        offsets = self.selection_offsets()
        if offsets is None:
            start = end = len(self._tree)
        else:
            start, end = offsets
        if end > start:
            self._delete_linear(start, end)
        location = self._mapper.to_tree(self._tree, start)
        if location is None:
            run = TextRun("")
            self._tree.root.append(run)
            location = TreeLocation(run, 0)
        run = location.run
        run.text = run.text[: location.offset] + text + run.text[location.offset :]
        caret = TreeLocation(run, location.offset + len(text))
        self._selection = NativeSelection(caret, caret)
        self._emit_text_changed()

    def backspace(self) -> None:
        offsets = self.selection_offsets()
        if offsets is None:
            return
        start, end = offsets
        if start == end:
            if start == 0:
                return
            start -= 1
        self._delete_linear(start, end)
        location = self._mapper.to_tree(self._tree, start)
        self._selection = NativeSelection(location, location) if location is not None else None
        self._emit_text_changed()

    def notify_changed(self) -> None:
        """Announce an external in-place mutation of the tree."""

        self._emit_text_changed()

    # ------------------------------------------------------------------
    # Listener registration
    # ------------------------------------------------------------------
    def add_text_listener(self, listener: TextChangeListener) -> None:
        self._text_listeners.append(listener)

    def remove_text_listener(self, listener: TextChangeListener) -> None:
        try:
            self._text_listeners.remove(listener)
        except ValueError:
            LOGGER.debug("Text listener was not registered")

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _delete_linear(self, start: int, end: int) -> None:
        consumed = 0
        for run in self._tree.leaves():
            run_start, run_end = consumed, consumed + len(run.text)
            consumed = run_end
            lo, hi = max(start, run_start), min(end, run_end)
            if lo >= hi:
                continue
            run.text = run.text[: lo - run_start] + run.text[hi - run_start :]
        self._tree.prune_empty_runs()

    def _emit_text_changed(self) -> None:
        for listener in list(self._text_listeners):
            listener(self._tree)
