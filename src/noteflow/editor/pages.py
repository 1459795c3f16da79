"""Page records and the add/delete/switch contract of a multi-page note."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional, Protocol

__all__ = ["DEFAULT_PAGE_COLOR", "Page", "PageListener", "PageStore"]

LOGGER = logging.getLogger(__name__)

DEFAULT_PAGE_COLOR = "#FFFFFF"


class PageListener(Protocol):
    """Callback signature fired whenever the current page changes."""

    def __call__(self, page: "Page") -> None:  # pragma: no cover - protocol
        ...


@dataclass(slots=True)
class Page:
    """One page of the note: serialized editor markup plus its background colour."""

    id: int
    content: str = ""
    color: str = DEFAULT_PAGE_COLOR
    title: str = ""

    def __post_init__(self) -> None:
        if not self.title:
            self.title = f"Note {self.id}"


class PageStore:
    """Ordered pages with exactly one current page.

    The store never becomes empty: deleting the last remaining page and
    switching to an index outside ``[0, count)`` are rejected as logged
    no-ops that return ``False``. Listeners receive the new current page so
    the editor can load its ``content``/``color``.
    """

    def __init__(self, *, default_color: str = DEFAULT_PAGE_COLOR) -> None:
        self._default_color = default_color
        self._pages: List[Page] = [Page(id=1, color=default_color)]
        self._current_index = 0
        self._listeners: List[PageListener] = []

    # ------------------------------------------------------------------
    # Page lifecycle
    # ------------------------------------------------------------------
    def add_page(self) -> Page:
        """Append a blank page with the next sequential id and make it current."""

        page = Page(id=self._next_id(), color=self._default_color)
        self._pages.append(page)
        self._current_index = len(self._pages) - 1
        LOGGER.debug("Added page %s (%s pages)", page.id, len(self._pages))
        self._notify_listeners()
        return page

    def delete_page(self, index: int) -> bool:
        """Remove the page at ``index``; the last remaining page cannot be deleted."""

        if len(self._pages) <= 1:
            LOGGER.warning("Refusing to delete the only page")
            return False
        if not 0 <= index < len(self._pages):
            LOGGER.warning("Cannot delete page %s: index out of range (0..%s)", index, len(self._pages) - 1)
            return False
        removed = self._pages.pop(index)
        current_changed = index == self._current_index
        if index < self._current_index or self._current_index >= len(self._pages):
            self._current_index = max(0, self._current_index - 1)
        LOGGER.debug("Deleted page %s", removed.id)
        if current_changed:
            self._notify_listeners()
        return True

    def switch_to(self, index: int) -> bool:
        if not 0 <= index < len(self._pages):
            LOGGER.warning("Cannot switch to page %s: index out of range (0..%s)", index, len(self._pages) - 1)
            return False
        if index == self._current_index:
            return True
        self._current_index = index
        self._notify_listeners()
        return True

    def next_page(self) -> bool:
        if self._current_index >= len(self._pages) - 1:
            return False
        return self.switch_to(self._current_index + 1)

    def previous_page(self) -> bool:
        if self._current_index == 0:
            return False
        return self.switch_to(self._current_index - 1)

    def update_current(self, *, content: Optional[str] = None, color: Optional[str] = None) -> Page:
        """Record the editor's latest markup and/or background colour on the current page."""

        page = self.current
        if content is not None:
            page.content = content
        if color is not None:
            page.color = color
        return page

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------
    def add_listener(self, listener: PageListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: PageListener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:  # pragma: no cover - defensive
            pass

    def _notify_listeners(self) -> None:
        page = self.current
        for listener in list(self._listeners):
            listener(page)

    # ------------------------------------------------------------------
    # Query helpers
    # ------------------------------------------------------------------
    @property
    def current(self) -> Page:
        return self._pages[self._current_index]

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def current_number(self) -> int:
        """1-based number of the current page, as shown in the page indicator."""

        return self._current_index + 1

    def page_count(self) -> int:
        return len(self._pages)

    def __len__(self) -> int:
        return len(self._pages)

    def __iter__(self) -> Iterator[Page]:
        return iter(list(self._pages))

    def __getitem__(self, index: int) -> Page:
        return self._pages[index]

    def _next_id(self) -> int:
        return max((page.id for page in self._pages), default=0) + 1
