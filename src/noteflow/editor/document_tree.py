"""Tree model for a page's rich-text content.

A :class:`DocumentTree` is an ordered tree whose leaves are :class:`TextRun`
objects and whose internal nodes are formatting :class:`Element` containers
(``b``, ``i``, ``ul``/``li``, alignment ``div`` wrappers, ``br`` line breaks).
The concatenation of every run's text in document order is the page's linear
text; offsets used by the caret and word tooling index into that string.

Void elements such as ``br`` have no children and therefore contribute no
characters to the linear text.
"""

from __future__ import annotations

import html
from dataclasses import dataclass, field
from typing import Iterator, Optional, Union

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import Comment, Declaration, Doctype, ProcessingInstruction

__all__ = [
    "BLOCK_TAGS",
    "DocumentTree",
    "Element",
    "Node",
    "TextRun",
    "VOID_TAGS",
    "ancestors",
    "split_run",
]

VOID_TAGS = frozenset({"br", "hr", "img", "input", "wbr"})
BLOCK_TAGS = frozenset(
    {"div", "p", "li", "ul", "ol", "blockquote", "h1", "h2", "h3", "h4", "h5", "h6", "pre"}
)
ROOT_TAG = "div"
_SKIPPED_STRINGS = (Comment, Declaration, Doctype, ProcessingInstruction)


@dataclass(eq=False, slots=True)
class TextRun:
    """Leaf node holding a run of text that shares its ancestors' formatting."""

    text: str = ""
    parent: Optional["Element"] = field(default=None, repr=False)

    def __len__(self) -> int:
        return len(self.text)


@dataclass(eq=False, slots=True)
class Element:
    """Formatting container (or line break) inside a document tree."""

    tag: str
    attrs: dict[str, str] = field(default_factory=dict)
    children: list["Node"] = field(default_factory=list)
    parent: Optional["Element"] = field(default=None, repr=False)

    @property
    def is_void(self) -> bool:
        return self.tag in VOID_TAGS

    @property
    def is_block(self) -> bool:
        return self.tag in BLOCK_TAGS

    def append(self, child: "Node") -> "Node":
        return self.insert(len(self.children), child)

    def insert(self, index: int, child: "Node") -> "Node":
        if child.parent is not None:
            child.parent.remove(child)
        child.parent = self
        self.children.insert(index, child)
        return child

    def remove(self, child: "Node") -> None:
        self.children.pop(self.index(child))
        child.parent = None

    def index(self, child: "Node") -> int:
        for position, candidate in enumerate(self.children):
            if candidate is child:
                return position
        raise ValueError("node is not a child of this element")

    def iter_runs(self) -> Iterator[TextRun]:
        """Yield every text run below this element in document order."""

        for child in self.children:
            if isinstance(child, TextRun):
                yield child
            else:
                yield from child.iter_runs()

    def text(self) -> str:
        return "".join(run.text for run in self.iter_runs())


Node = Union[TextRun, Element]


def ancestors(node: Node) -> Iterator[Element]:
    """Yield the parents of ``node`` from the nearest outwards."""

    current = node.parent
    while current is not None:
        yield current
        current = current.parent


def split_run(run: TextRun, offset: int) -> TextRun | None:
    """Split ``run`` at ``offset`` and return the run holding the right-hand text.

    The left part stays in ``run``; the right part becomes a new sibling that
    shares the same parent (and therefore the same formatting). Offsets on
    either edge of the run leave it untouched and return ``None``.
    """

    if offset <= 0 or offset >= len(run.text):
        return None
    parent = run.parent
    if parent is None:
        raise ValueError("cannot split a detached text run")
    right = TextRun(run.text[offset:])
    run.text = run.text[:offset]
    parent.insert(parent.index(run) + 1, right)
    return right


class DocumentTree:
    """Rich-text content of a single page."""

    def __init__(self, root: Element | None = None) -> None:
        self._root = root if root is not None else Element(ROOT_TAG)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    @classmethod
    def from_html(cls, markup: str | None) -> "DocumentTree":
        """Parse editor markup (an ``innerHTML`` string) into a tree."""

        root = Element(ROOT_TAG)
        if markup:
            soup = BeautifulSoup(markup, "html.parser")
            _adopt_children(root, soup)
        return cls(root)

    @classmethod
    def from_text(cls, text: str) -> "DocumentTree":
        root = Element(ROOT_TAG)
        if text:
            root.append(TextRun(text))
        return cls(root)

    def copy(self) -> "DocumentTree":
        return DocumentTree(_clone(self._root))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def root(self) -> Element:
        return self._root

    def leaves(self) -> list[TextRun]:
        return list(self._root.iter_runs())

    def text(self) -> str:
        return self._root.text()

    def __len__(self) -> int:
        return sum(len(run.text) for run in self._root.iter_runs())

    @property
    def is_empty(self) -> bool:
        """Return ``True`` when the tree has no text runs at all."""

        return next(self._root.iter_runs(), None) is None

    def contains(self, node: Node) -> bool:
        return any(parent is self._root for parent in ancestors(node))

    # ------------------------------------------------------------------
    # Mutation helpers
    # ------------------------------------------------------------------
    def prune_empty_runs(self, *, keep: TextRun | None = None) -> None:
        """Drop zero-length runs, except ``keep`` which may anchor the caret."""

        for run in self.leaves():
            if not run.text and run is not keep and run.parent is not None:
                run.parent.remove(run)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------
    def to_html(self) -> str:
        """Serialize the children of the root back into editor markup."""

        return "".join(_serialize(child) for child in self._root.children)

    def __repr__(self) -> str:
        return f"DocumentTree({self.to_html()!r})"


def _adopt_children(target: Element, source: Tag | BeautifulSoup) -> None:
    for child in source.children:
        if isinstance(child, _SKIPPED_STRINGS):
            continue
        if isinstance(child, NavigableString):
            text = str(child)
            if text:
                target.append(TextRun(text))
            continue
        if isinstance(child, Tag):
            element = Element(child.name.lower(), _normalize_attrs(child.attrs))
            target.append(element)
            if element.tag not in VOID_TAGS:
                _adopt_children(element, child)


def _normalize_attrs(attrs: dict) -> dict[str, str]:
    normalized: dict[str, str] = {}
    for key, value in attrs.items():
        if isinstance(value, (list, tuple)):
            value = " ".join(str(item) for item in value)
        normalized[str(key).lower()] = "" if value is None else str(value)
    return normalized


def _clone(node: Node) -> Node:
    if isinstance(node, TextRun):
        return TextRun(node.text)
    copy = Element(node.tag, dict(node.attrs))
    for child in node.children:
        copy.append(_clone(child))
    return copy


def _serialize(node: Node) -> str:
    if isinstance(node, TextRun):
        return html.escape(node.text, quote=False)
    attrs = "".join(
        f' {name}="{html.escape(value, quote=True)}"' for name, value in node.attrs.items()
    )
    if node.is_void:
        return f"<{node.tag}{attrs}>"
    inner = "".join(_serialize(child) for child in node.children)
    return f"<{node.tag}{attrs}>{inner}</{node.tag}>"
