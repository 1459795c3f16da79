"""Tests for committing a suggestion over the word at the caret."""

from __future__ import annotations

from typing import List

from noteflow.editor.document_tree import DocumentTree
from noteflow.editor.replacer import (
    ReplaceFailure,
    ReplaceFailureReason,
    ReplaceResult,
    ReplaceState,
    WordReplacer,
)
from noteflow.editor.words import WordLocator, WordSpan

from tests.helpers import make_editor


def _replace_at(markup: str, caret_offset: int, replacement: str):
    surface, caret = make_editor(markup)
    caret.restore(surface.tree, caret_offset)
    span = WordLocator().locate(surface.tree, caret_offset)
    replacer = WordReplacer(surface, caret)
    result = replacer.replace(surface.tree, span, replacement)
    return surface, caret, replacer, result


def test_selecting_suggestion_completes_word_and_moves_caret() -> None:
    surface, caret, _, result = _replace_at("I like ca", 9, "cat")

    assert isinstance(result, ReplaceResult)
    assert surface.text() == "I like cat "
    assert result.new_caret == 11
    assert caret.save(surface.tree) == 11
    assert result.caret_restored
    assert not result.lossy


def test_replacing_with_same_word_only_normalizes_spacing() -> None:
    surface, caret, _, result = _replace_at("I like cat", 10, "cat")

    assert isinstance(result, ReplaceResult)
    assert surface.text() == "I like cat "
    assert result.new_caret == 7 + len("cat") + 1
    assert caret.save(surface.tree) == result.new_caret


def test_single_run_edit_preserves_formatting_in_place() -> None:
    surface, _, _, result = _replace_at("<p>say <b>helo</b> now</p>", 6, "hello")

    assert isinstance(result, ReplaceResult)
    assert result.new_root is surface.tree
    assert surface.to_html() == "<p>say <b>hello </b> now</p>"
    assert result.new_caret == 10


def test_full_word_is_replaced_when_caret_is_mid_word() -> None:
    surface, _, _, result = _replace_at("<b>Hello</b> wrld", 7, "world")

    assert isinstance(result, ReplaceResult)
    assert surface.to_html() == "<b>Hello</b> world "
    assert result.new_caret == 12


def test_word_crossing_runs_uses_lossy_flat_replacement() -> None:
    surface, caret, _, result = _replace_at("<b>ca</b>t sat", 3, "cart")

    assert isinstance(result, ReplaceResult)
    assert result.lossy
    assert surface.tree is result.new_root
    assert surface.text() == "cart  sat"
    assert surface.to_html() == "<b>cart </b> sat"
    assert caret.save(surface.tree) == 5


def test_empty_span_is_rejected() -> None:
    surface, caret = make_editor("hello ")
    replacer = WordReplacer(surface, caret)

    result = replacer.replace(surface.tree, WordSpan.empty(6), "x")

    assert isinstance(result, ReplaceFailure)
    assert not result
    assert result.reason is ReplaceFailureReason.NO_WORD
    assert surface.text() == "hello "


def test_span_outside_document_is_rejected() -> None:
    surface, caret = make_editor("cat")
    replacer = WordReplacer(surface, caret)

    result = replacer.replace(surface.tree, WordSpan("dog", 10, 13, 13), "dogs")

    assert isinstance(result, ReplaceFailure)
    assert result.reason is ReplaceFailureReason.OUT_OF_RANGE


def test_stale_span_leaves_document_untouched() -> None:
    surface, caret = make_editor("cat")
    replacer = WordReplacer(surface, caret)

    result = replacer.replace(surface.tree, WordSpan("dog", 0, 3, 3), "dogs")

    assert isinstance(result, ReplaceFailure)
    assert result.reason is ReplaceFailureReason.STALE_SPAN
    assert surface.text() == "cat"


def test_reentrant_replace_is_refused() -> None:
    surface, caret = make_editor("I like ca")
    replacer = WordReplacer(surface, caret)
    nested: List[object] = []

    def _reenter(tree: DocumentTree) -> None:
        assert replacer.state is ReplaceState.REPLACING
        nested.append(replacer.replace(tree, WordLocator().locate(tree, 3), "xyz"))

    surface.add_text_listener(_reenter)
    result = replacer.replace(surface.tree, WordLocator().locate(surface.tree, 9), "cat")

    assert isinstance(result, ReplaceResult)
    assert len(nested) == 1
    busy = nested[0]
    assert isinstance(busy, ReplaceFailure)
    assert busy.reason is ReplaceFailureReason.BUSY
    assert surface.text() == "I like cat "
    assert replacer.state is ReplaceState.IDLE


def test_failed_caret_restore_keeps_mutation() -> None:
    surface, caret = make_editor("ca")
    replacer = WordReplacer(surface, caret)
    detached = DocumentTree.from_text("ca")

    result = replacer.replace(detached, WordLocator().locate(detached, 2), "cat")

    assert isinstance(result, ReplaceResult)
    assert detached.text() == "cat "
    assert result.caret_restored is False
    assert surface.text() == "ca"
