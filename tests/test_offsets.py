"""Tests for linear offset <-> tree location mapping."""

from __future__ import annotations

import pytest

from noteflow.editor.document_tree import DocumentTree, TextRun
from noteflow.editor.offsets import OffsetMapper, TreeLocation, to_linear, to_tree


@pytest.mark.parametrize(
    "markup",
    [
        "plain text",
        "<b>Hello</b> <i>big</i> wrld<br>x",
        "<ul><li>one</li><li><b>t</b>wo</li></ul><div>three</div>",
        "<p></p><b></b>ab",
    ],
)
def test_round_trip_for_every_offset(markup: str) -> None:
    tree = DocumentTree.from_html(markup)
    mapper = OffsetMapper()

    for offset in range(len(tree.text()) + 1):
        location = mapper.to_tree(tree, offset)
        assert location is not None
        assert mapper.to_linear(tree, location) == offset


def test_to_tree_prefers_the_run_ending_at_a_boundary() -> None:
    tree = DocumentTree.from_html("<b>Hello</b> wrld")
    bold, plain = tree.leaves()

    assert to_tree(tree, 5) == TreeLocation(bold, 5)
    assert to_tree(tree, 6) == TreeLocation(plain, 1)


def test_to_tree_clamps_out_of_range_offsets() -> None:
    tree = DocumentTree.from_html("<b>ab</b>cd")
    last = tree.leaves()[-1]
    first = tree.leaves()[0]

    assert to_tree(tree, 99) == TreeLocation(last, 2)
    assert to_tree(tree, -3) == TreeLocation(first, 0)


def test_empty_tree_maps_to_none() -> None:
    tree = DocumentTree()

    assert to_tree(tree, 0) is None
    assert to_linear(tree, None) == 0


def test_detached_run_maps_to_document_end() -> None:
    tree = DocumentTree.from_html("abc<i>de</i>")

    assert to_linear(tree, TreeLocation(TextRun("zz"), 1)) == 5


def test_local_offset_is_clamped_to_run_length() -> None:
    tree = DocumentTree.from_html("<b>ab</b>cd")
    bold = tree.leaves()[0]

    assert to_linear(tree, TreeLocation(bold, 10)) == 2


def test_run_start_reports_offsets() -> None:
    tree = DocumentTree.from_html("<b>ab</b>cd")
    mapper = OffsetMapper()

    assert mapper.run_start(tree, tree.leaves()[1]) == 2
    assert mapper.run_start(tree, TextRun("x")) is None
