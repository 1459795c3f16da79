"""Replace the word at the caret with a chosen suggestion."""

from __future__ import annotations

import contextlib
import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator

from .caret import CaretController
from .document_tree import DocumentTree, TextRun
from .surface import EditorSurface
from .words import WordSpan

__all__ = [
    "ReplaceFailure",
    "ReplaceFailureReason",
    "ReplaceResult",
    "ReplaceState",
    "WordReplacer",
]

LOGGER = logging.getLogger(__name__)


class ReplaceState(Enum):
    IDLE = auto()
    REPLACING = auto()


class ReplaceFailureReason(Enum):
    NO_WORD = "no-word"
    BUSY = "busy"
    OUT_OF_RANGE = "out-of-range"
    STALE_SPAN = "stale-span"


@dataclass(slots=True, frozen=True)
class ReplaceResult:
    """Outcome of a committed replacement.

    ``lossy`` marks the cross-run fallback, where the replaced region takes
    on the formatting of the run the word started in. ``caret_restored`` is
    ``False`` when the content changed but the caret could not be placed.
    """

    new_root: DocumentTree
    new_caret: int
    lossy: bool = False
    caret_restored: bool = True


@dataclass(slots=True, frozen=True)
class ReplaceFailure:
    reason: ReplaceFailureReason

    def __bool__(self) -> bool:
        return False


class WordReplacer:
    """Splices a replacement (plus a trailing space) over a located word.

    The common case edits the single text run holding the word in place, so
    bold/italic/etc. wrappers survive untouched. A word split across runs is
    rewritten as flat text into its first run instead (``lossy=True``).
    """

    def __init__(self, surface: EditorSurface, caret: CaretController) -> None:
        self._surface = surface
        self._caret = caret
        self._state = ReplaceState.IDLE

    @property
    def state(self) -> ReplaceState:
        return self._state

    def replace(
        self, root: DocumentTree, span: WordSpan, replacement: str
    ) -> ReplaceResult | ReplaceFailure:
        if self._state is ReplaceState.REPLACING:
            LOGGER.debug("Rejecting re-entrant replacement of %r", span.word)
            return ReplaceFailure(ReplaceFailureReason.BUSY)
        with self._replacing():
            return self._replace(root, span, replacement)

    @contextlib.contextmanager
    def _replacing(self) -> Iterator[None]:
        self._state = ReplaceState.REPLACING
        try:
            yield
        finally:
            self._state = ReplaceState.IDLE

    def _replace(self, root: DocumentTree, span: WordSpan, replacement: str) -> ReplaceResult | ReplaceFailure:
        if span.is_empty:
            return ReplaceFailure(ReplaceFailureReason.NO_WORD)
        text = root.text()
        if span.end > len(text):
            return ReplaceFailure(ReplaceFailureReason.OUT_OF_RANGE)
        if text[span.start : span.end] != span.word:
            LOGGER.debug("Word span %r no longer matches the document", span.word)
            return ReplaceFailure(ReplaceFailureReason.STALE_SPAN)

        inserted = f"{replacement} "
        new_caret = span.start + len(inserted)
        located = _run_containing(root, span.start)
        if located is None:  # pragma: no cover - span checks above rule this out
            return ReplaceFailure(ReplaceFailureReason.OUT_OF_RANGE)
        run, run_start = located

        if span.end <= run_start + len(run.text):
            local_start = span.start - run_start
            local_end = span.end - run_start
            run.text = run.text[:local_start] + inserted + run.text[local_end:]
            new_root, lossy = root, False
        else:
            LOGGER.info("Word %r crosses a formatting boundary; using flat-text replacement", span.word)
            new_root, lossy = _flat_replace(root, span.start, span.end, inserted), True

        self._commit(root, new_root)
        restored = self._caret.restore(new_root, new_caret)
        if not restored:
            LOGGER.warning("Replacement committed but caret could not be placed at %s", new_caret)
        return ReplaceResult(new_root=new_root, new_caret=new_caret, lossy=lossy, caret_restored=restored)

    def _commit(self, old_root: DocumentTree, new_root: DocumentTree) -> None:
        if self._surface.tree is not old_root:
            return
        if new_root is old_root:
            self._surface.notify_changed()
        else:
            self._surface.replace_tree(new_root)


def _run_containing(root: DocumentTree, offset: int) -> tuple[TextRun, int] | None:
    """Return the run holding the character at ``offset`` and that run's start offset."""

    consumed = 0
    for run in root.root.iter_runs():
        length = len(run.text)
        if consumed <= offset < consumed + length:
            return run, consumed
        consumed += length
    return None


def _flat_replace(root: DocumentTree, start: int, end: int, inserted: str) -> DocumentTree:
    """Rewrite ``[start, end)`` as plain text in a copy of ``root``.

    The replacement lands in the first affected run; characters of the
    span held by later runs are cut from them and emptied runs are dropped.
    """

    tree = root.copy()
    consumed = 0
    first: TextRun | None = None
    for run in tree.leaves():
        run_start, run_end = consumed, consumed + len(run.text)
        consumed = run_end
        lo, hi = max(start, run_start), min(end, run_end)
        if lo >= hi:
            continue
        if first is None:
            first = run
            run.text = run.text[: lo - run_start] + inserted + run.text[hi - run_start :]
        else:
            run.text = run.text[: lo - run_start] + run.text[hi - run_start :]
    tree.prune_empty_runs(keep=first)
    return tree
