"""Locate the alphabetic word surrounding a caret offset."""

from __future__ import annotations

from dataclasses import dataclass

from ..core.ranges import TextRange
from .document_tree import DocumentTree

__all__ = ["WordLocator", "WordSpan", "is_word_char", "locate"]


def is_word_char(char: str) -> bool:
    """Return ``True`` for ASCII letters, the only characters that form words."""

    return ("a" <= char <= "z") or ("A" <= char <= "Z")


@dataclass(slots=True, frozen=True)
class WordSpan:
    """Bounds of the word at a caret.

    ``word`` is the whole alphabetic run ``text[start:end]``; ``caret`` is the
    offset the span was located from. ``start == end`` means there is no word.
    """

    word: str
    start: int
    end: int
    caret: int

    @property
    def typed_prefix(self) -> str:
        """The part of the word typed so far (everything before the caret)."""

        return self.word[: self.caret - self.start]

    @property
    def full_span(self) -> TextRange:
        return TextRange(self.start, self.end)

    @property
    def is_empty(self) -> bool:
        return self.start == self.end

    @classmethod
    def empty(cls, offset: int = 0) -> "WordSpan":
        return cls(word="", start=offset, end=offset, caret=offset)


class WordLocator:
    """Finds the maximal ``[A-Za-z]+`` run containing or ending at the caret."""

    def locate(self, root: DocumentTree, caret_offset: int) -> WordSpan:
        return self.locate_in_text(root.text(), caret_offset)

    def locate_in_text(self, text: str, caret_offset: int) -> WordSpan:
        caret = max(0, min(int(caret_offset), len(text)))
        start = caret
        while start > 0 and is_word_char(text[start - 1]):
            start -= 1
        end = caret
        while end < len(text) and is_word_char(text[end]):
            end += 1
        return WordSpan(word=text[start:end], start=start, end=end, caret=caret)


def locate(root: DocumentTree, caret_offset: int) -> WordSpan:
    return WordLocator().locate(root, caret_offset)
