"""Editor package: document tree, offset mapping, caret, words and formatting."""

from .caret import CaretController
from .document_tree import DocumentTree, Element, TextRun
from .formatting import FormatCommandWrapper
from .offsets import OffsetMapper, TreeLocation
from .pages import Page, PageStore
from .replacer import ReplaceFailure, ReplaceFailureReason, ReplaceResult, WordReplacer
from .surface import EditorSurface
from .words import WordLocator, WordSpan

__all__ = [
    "CaretController",
    "DocumentTree",
    "EditorSurface",
    "Element",
    "FormatCommandWrapper",
    "OffsetMapper",
    "Page",
    "PageStore",
    "ReplaceFailure",
    "ReplaceFailureReason",
    "ReplaceResult",
    "TextRun",
    "TreeLocation",
    "WordLocator",
    "WordReplacer",
    "WordSpan",
]
