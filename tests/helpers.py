"""Shared test helpers and stub classes.

Import from here instead of duplicating these classes in individual test files.
"""

from __future__ import annotations

import asyncio
from typing import Callable, Dict, List, Mapping, Sequence

from noteflow.core.errors import SuggestionTransportError
from noteflow.editor.caret import CaretController
from noteflow.editor.document_tree import DocumentTree
from noteflow.editor.surface import EditorSurface
from noteflow.editor.words import WordLocator, WordSpan


class FakeSuggestionSource:
    """In-memory suggestion source recording every lookup.

    ``gates`` holds events that a lookup for that word waits on before
    answering, which lets tests control the order responses arrive in.
    """

    def __init__(
        self,
        responses: Mapping[str, Sequence[object]] | None = None,
        *,
        fail_words: Sequence[str] = (),
    ) -> None:
        self.responses: Dict[str, List[object]] = {k: list(v) for k, v in (responses or {}).items()}
        self.fail_words = set(fail_words)
        self.gates: Dict[str, asyncio.Event] = {}
        self.calls: List[str] = []
        self.closed = False

    async def suggest(self, word: str) -> List[object]:
        self.calls.append(word)
        gate = self.gates.get(word)
        if gate is not None:
            await gate.wait()
        if word in self.fail_words:
            raise SuggestionTransportError(f"lookup for {word} failed")
        return list(self.responses.get(word, []))

    async def aclose(self) -> None:
        self.closed = True


async def wait_until(predicate: Callable[[], bool], *, timeout: float = 1.0) -> None:
    """Yield to the event loop until ``predicate`` holds."""

    async def _poll() -> None:
        while not predicate():
            await asyncio.sleep(0.002)

    await asyncio.wait_for(_poll(), timeout)


def span_at_end(text: str) -> WordSpan:
    return WordLocator().locate_in_text(text, len(text))


def make_editor(markup: str) -> tuple[EditorSurface, CaretController]:
    surface = EditorSurface(DocumentTree.from_html(markup))
    return surface, CaretController(surface)
