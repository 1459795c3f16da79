"""Editing session wiring the editor core to the suggestion pipeline and pages."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Iterator

from .core.ranges import TextRange
from .editor import commands
from .editor.caret import CaretController
from .editor.document_tree import DocumentTree
from .editor.export import ExportedPage, export_page
from .editor.formatting import FormatCommandWrapper
from .editor.pages import Page, PageStore
from .editor.replacer import ReplaceFailure, ReplaceResult, WordReplacer
from .editor.surface import EditorSurface
from .editor.words import WordLocator, WordSpan
from .services.settings import Settings
from .suggestions.bubble import Size
from .suggestions.client import SuggestionSource
from .suggestions.orchestrator import GeometryProvider, KeyEventHub, SuggestionOrchestrator, SuggestionState

__all__ = ["EditingSession"]

LOGGER = logging.getLogger(__name__)


class EditingSession:
    """One editor instance: the current page's surface plus everything acting on it.

    Keystrokes flow surface -> offset mapper -> word locator -> orchestrator;
    a chosen suggestion flows back through the word replacer. Every content
    change is written back to the current page so switching pages never
    loses edits. Without an explicit ``loop`` the session has to be created
    inside a running event loop.
    """

    def __init__(
        self,
        source: SuggestionSource,
        *,
        settings: Settings | None = None,
        pages: PageStore | None = None,
        geometry: GeometryProvider | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._settings = settings or Settings()
        self._pages = pages if pages is not None else PageStore(default_color=self._settings.default_page_color)
        self._surface = EditorSurface()
        self._caret = CaretController(self._surface)
        self._locator = WordLocator()
        self._replacer = WordReplacer(self._surface, self._caret)
        self._formatter = FormatCommandWrapper(
            self._surface, self._caret, on_background_color=self._apply_page_color
        )
        self._key_hub = KeyEventHub()
        self._orchestrator = SuggestionOrchestrator(
            source,
            debounce_ms=self._settings.debounce_ms,
            min_prefix_length=self._settings.min_prefix_length,
            max_suggestions=self._settings.max_suggestions,
            key_hub=self._key_hub,
            bubble_size=Size(self._settings.bubble_width, self._settings.bubble_height),
            geometry=geometry,
            on_commit=self._commit_suggestion,
            loop=loop,
        )
        self._input_suppressed = False
        self._surface.add_text_listener(self._on_text_changed)
        self._pages.add_listener(self._on_page_changed)
        self._load_page(self._pages.current)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def surface(self) -> EditorSurface:
        return self._surface

    @property
    def caret(self) -> CaretController:
        return self._caret

    @property
    def pages(self) -> PageStore:
        return self._pages

    @property
    def orchestrator(self) -> SuggestionOrchestrator:
        return self._orchestrator

    @property
    def suggestions(self) -> SuggestionState:
        return self._orchestrator.state

    @property
    def tree(self) -> DocumentTree:
        return self._surface.tree

    def text(self) -> str:
        return self._surface.text()

    def caret_offset(self) -> int:
        return self._caret.save(self._surface.tree)

    def word_at_caret(self) -> WordSpan:
        tree = self._surface.tree
        return self._locator.locate(tree, self._caret.save(tree))

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------
    def type_text(self, text: str) -> None:
        self._surface.type_text(text)

    def paste(self, text: str) -> None:
        """Insert clipboard content as plain text at the caret."""

        self._surface.type_text(text)

    def backspace(self) -> None:
        self._surface.backspace()

    def key_down(self, key: str) -> bool:
        """Offer a key press to the suggestion bubble; ``True`` means it was consumed."""

        return self._key_hub.dispatch(key)

    def move_caret(self, offset: int) -> bool:
        self._orchestrator.cancel()
        return self._caret.restore(self._surface.tree, offset)

    def select(self, start: int, end: int) -> bool:
        self._orchestrator.cancel()
        return self._caret.restore_selection(self._surface.tree, TextRange(start, end))

    # ------------------------------------------------------------------
    # Formatting
    # ------------------------------------------------------------------
    def apply_format(self, command: str, value: str | None = None) -> DocumentTree:
        self._orchestrator.cancel()
        with self._suppressed_input():
            new_root = self._formatter.apply(self._surface.tree, command, value)
        self._snapshot()
        return new_root

    def active_formats(self) -> set[str]:
        tree = self._surface.tree
        return commands.active_formats(tree, self._caret.save(tree))

    def _apply_page_color(self, color: str) -> None:
        self._pages.update_current(color=color)

    @property
    def page_color(self) -> str:
        return self._pages.current.color

    # ------------------------------------------------------------------
    # Suggestions
    # ------------------------------------------------------------------
    def _commit_suggestion(self, span: WordSpan, word: str) -> ReplaceResult | ReplaceFailure:
        with self._suppressed_input():
            result = self._replacer.replace(self._surface.tree, span, word)
        if not result:
            LOGGER.debug("Suggestion %r not applied: %s", word, result)
        self._snapshot()
        return result

    # ------------------------------------------------------------------
    # Pages
    # ------------------------------------------------------------------
    def add_page(self) -> Page:
        return self._pages.add_page()

    def delete_page(self, index: int | None = None) -> bool:
        target = self._pages.current_index if index is None else index
        return self._pages.delete_page(target)

    def switch_to(self, index: int) -> bool:
        return self._pages.switch_to(index)

    def export_current(self) -> ExportedPage:
        return export_page(self._pages.current, self._pages.current_number)

    def _on_page_changed(self, page: Page) -> None:
        self._orchestrator.cancel()
        self._load_page(page)

    def _load_page(self, page: Page) -> None:
        with self._suppressed_input():
            self._surface.load_html(page.content)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    async def aclose(self) -> None:
        self._surface.remove_text_listener(self._on_text_changed)
        self._pages.remove_listener(self._on_page_changed)
        await self._orchestrator.aclose()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    @contextlib.contextmanager
    def _suppressed_input(self) -> Iterator[None]:
        previous = self._input_suppressed
        self._input_suppressed = True
        try:
            yield
        finally:
            self._input_suppressed = previous

    def _on_text_changed(self, tree: DocumentTree) -> None:
        if self._input_suppressed:
            return
        self._snapshot()
        self._orchestrator.on_input(self._locator.locate(tree, self._caret.save(tree)))

    def _snapshot(self) -> None:
        self._pages.update_current(content=self._surface.to_html())
