"""Tests for caret and selection save/restore."""

from __future__ import annotations

from noteflow.core.ranges import TextRange
from noteflow.editor.caret import CaretController
from noteflow.editor.document_tree import DocumentTree
from noteflow.editor.surface import EditorSurface

from tests.helpers import make_editor


def test_save_without_selection_is_zero() -> None:
    surface, caret = make_editor("hello")

    assert caret.save(surface.tree) == 0
    assert caret.save_selection(surface.tree) is None


def test_restore_then_save_round_trips() -> None:
    surface, caret = make_editor("<b>Hello</b> wrld")

    assert caret.restore(surface.tree, 7) is True
    assert caret.save(surface.tree) == 7
    assert surface.selection is not None
    assert surface.selection.is_collapsed


def test_restore_past_end_clamps_to_document_end() -> None:
    surface, caret = make_editor("<i>abc</i>de")

    assert caret.restore(surface.tree, 50) is True
    assert caret.save(surface.tree) == 5


def test_restore_on_empty_tree_fails_quietly() -> None:
    surface = EditorSurface(DocumentTree())
    caret = CaretController(surface)

    assert caret.restore(surface.tree, 3) is False
    assert surface.selection is None


def test_restore_against_foreign_tree_fails_quietly() -> None:
    surface, caret = make_editor("abc")
    other = DocumentTree.from_text("other")

    assert caret.restore(other, 2) is False


def test_selection_round_trip_across_runs() -> None:
    surface, caret = make_editor("ab<b>cde</b>fghij")

    assert caret.restore_selection(surface.tree, TextRange(2, 5)) is True
    assert caret.save_selection(surface.tree) == TextRange(2, 5)
    assert surface.selection_offsets() == (2, 5)


def test_selection_becomes_unavailable_when_runs_leave_the_tree() -> None:
    surface, caret = make_editor("abc")
    caret.restore(surface.tree, 1)

    surface.tree.root.remove(surface.tree.leaves()[0])

    assert surface.selection is None
    assert caret.save(surface.tree) == 0
