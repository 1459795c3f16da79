"""Tests for word location around the caret."""

from __future__ import annotations

from noteflow.core.ranges import TextRange
from noteflow.editor.document_tree import DocumentTree
from noteflow.editor.words import WordLocator, WordSpan, is_word_char, locate


def test_word_before_caret_at_end_of_text() -> None:
    span = locate(DocumentTree.from_text("I like ca"), 9)

    assert span.typed_prefix == "ca"
    assert span.full_span == TextRange(7, 9)
    assert span.word == "ca"


def test_caret_inside_word_splits_prefix_from_full_span() -> None:
    span = locate(DocumentTree.from_html("<b>Hello</b> wrld"), 7)

    assert span.typed_prefix == "w"
    assert span.word == "wrld"
    assert (span.start, span.end) == (6, 10)


def test_word_spans_formatting_boundaries() -> None:
    span = locate(DocumentTree.from_html("<b>ca</b>t sat"), 3)

    assert span.word == "cat"
    assert span.full_span == TextRange(0, 3)


def test_empty_document_yields_empty_span() -> None:
    span = locate(DocumentTree(), 0)

    assert span.is_empty
    assert (span.start, span.end) == (0, 0)
    assert span.typed_prefix == ""


def test_caret_at_document_start_stops_immediately() -> None:
    span = WordLocator().locate_in_text("hello", 0)

    assert span.start == 0
    assert span.typed_prefix == ""
    assert span.word == "hello"


def test_punctuation_digits_and_non_ascii_end_words() -> None:
    locator = WordLocator()

    assert locator.locate_in_text("don't", 5).word == "t"
    assert locator.locate_in_text("abc1def", 7).word == "def"
    assert locator.locate_in_text("cafés", 5).word == "s"
    assert not is_word_char("é")


def test_caret_outside_text_is_clamped() -> None:
    span = WordLocator().locate_in_text("hi there", 99)

    assert span.caret == 8
    assert span.word == "there"


def test_empty_span_factory() -> None:
    assert WordSpan.empty(4) == WordSpan(word="", start=4, end=4, caret=4)
