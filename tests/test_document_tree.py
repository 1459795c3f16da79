"""Tests for the document tree model."""

from __future__ import annotations

from noteflow.editor.document_tree import DocumentTree, Element, TextRun, ancestors, split_run


def test_from_html_round_trips_markup() -> None:
    markup = '<div style="text-align: center;"><b>Hello</b> <i>big</i> world</div><br>'

    tree = DocumentTree.from_html(markup)

    assert tree.to_html() == markup
    assert tree.text() == "Hello big world"


def test_line_breaks_contribute_no_characters() -> None:
    tree = DocumentTree.from_html("one<br>two")

    assert tree.text() == "onetwo"
    assert len(tree) == 6


def test_comments_are_dropped_and_text_is_escaped() -> None:
    tree = DocumentTree.from_html("a<!-- note -->&lt;b&gt;")

    assert tree.text() == "a<b>"
    assert tree.to_html() == "a&lt;b&gt;"


def test_empty_markup_yields_empty_tree() -> None:
    tree = DocumentTree.from_html("")

    assert tree.is_empty
    assert tree.text() == ""
    assert tree.leaves() == []


def test_copy_is_independent() -> None:
    tree = DocumentTree.from_html("<b>bold</b>")
    clone = tree.copy()

    clone.leaves()[0].text = "changed"

    assert tree.text() == "bold"
    assert clone.to_html() == "<b>changed</b>"


def test_split_run_keeps_formatting_and_ignores_edges() -> None:
    tree = DocumentTree.from_html("<b>abcd</b>")
    run = tree.leaves()[0]

    assert split_run(run, 0) is None
    assert split_run(run, 4) is None
    right = split_run(run, 1)

    assert right is not None
    assert [leaf.text for leaf in tree.leaves()] == ["a", "bcd"]
    assert tree.to_html() == "<b>abcd</b>"
    assert right.parent is run.parent


def test_contains_and_ancestors_follow_parent_links() -> None:
    tree = DocumentTree.from_html("<p><b>x</b></p>")
    run = tree.leaves()[0]

    assert [element.tag for element in ancestors(run)] == ["b", "p", "div"]
    assert tree.contains(run)
    assert not tree.contains(TextRun("x"))


def test_prune_empty_runs_honours_keep() -> None:
    root = Element("div")
    keep = root.append(TextRun(""))
    root.append(TextRun(""))
    root.append(TextRun("x"))
    tree = DocumentTree(root)

    tree.prune_empty_runs(keep=keep)  # type: ignore[arg-type]

    assert [leaf.text for leaf in tree.leaves()] == ["", "x"]
