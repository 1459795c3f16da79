"""Translation between linear character offsets and tree locations."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .document_tree import DocumentTree, TextRun

__all__ = ["OffsetMapper", "TreeLocation", "to_linear", "to_tree"]

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class TreeLocation:
    """A position inside a specific text run: ``(run, local offset)``."""

    run: TextRun
    offset: int


class OffsetMapper:
    """Pure forward/inverse mapping between offsets and :class:`TreeLocation` values.

    ``to_linear`` sums the lengths of every run preceding the target run plus
    the local offset; ``to_tree`` walks the runs in order and returns the first
    run whose end reaches the requested offset. For every offset ``o`` in
    ``[0, len(text)]`` the pair round-trips: ``to_linear(to_tree(o)) == o``.
    Neither direction raises for out-of-range input; offsets clamp to the
    document bounds and a tree without runs maps to ``None``.
    """

    def to_linear(self, root: DocumentTree, location: TreeLocation | None) -> int:
        if location is None:
            return 0
        consumed = 0
        for run in root.root.iter_runs():
            if run is location.run:
                return consumed + max(0, min(location.offset, len(run.text)))
            consumed += len(run.text)
        LOGGER.debug("Location run is not part of the tree; mapping to document end")
        return consumed

    def to_tree(self, root: DocumentTree, offset: int) -> TreeLocation | None:
        target = max(0, int(offset))
        consumed = 0
        last: TextRun | None = None
        for run in root.root.iter_runs():
            length = len(run.text)
            if consumed + length >= target:
                return TreeLocation(run, target - consumed)
            consumed += length
            last = run
        if last is None:
            return None
        return TreeLocation(last, len(last.text))

    def run_start(self, root: DocumentTree, run: TextRun) -> int | None:
        """Return the linear offset where ``run`` begins, or ``None`` when detached."""

        consumed = 0
        for candidate in root.root.iter_runs():
            if candidate is run:
                return consumed
            consumed += len(candidate.text)
        return None


_DEFAULT_MAPPER = OffsetMapper()


def to_linear(root: DocumentTree, location: TreeLocation | None) -> int:
    return _DEFAULT_MAPPER.to_linear(root, location)


def to_tree(root: DocumentTree, offset: int) -> TreeLocation | None:
    return _DEFAULT_MAPPER.to_tree(root, offset)
