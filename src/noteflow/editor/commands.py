"""Tree mutations behind the formatting toolbar.

These are the rich-text surface's own editing commands (bold, alignment,
lists, line breaks, ...). Each one works on the tree it is handed, addressed
by linear offsets, and returns a :class:`CommandOutcome`. Callers that need
the previous tree intact pass a copy.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from ..core.ranges import TextRange
from .document_tree import DocumentTree, Element, Node, TextRun, ancestors, split_run

__all__ = [
    "BULLET_TEXT",
    "CommandOutcome",
    "INLINE_TAGS",
    "active_formats",
    "insert_line_break",
    "insert_text",
    "set_alignment",
    "toggle_inline",
    "toggle_list",
    "wrap_inline",
]

LOGGER = logging.getLogger(__name__)

BULLET_TEXT = "•  "

# Tag written for a toggle, plus the equivalent tags that count as "already applied".
INLINE_TAGS: dict[str, tuple[str, frozenset[str]]] = {
    "bold": ("b", frozenset({"b", "strong"})),
    "italic": ("i", frozenset({"i", "em"})),
    "underline": ("u", frozenset({"u"})),
    "strikethrough": ("s", frozenset({"s", "strike", "del"})),
}
_LIST_TAGS = {"ordered-list": "ol", "unordered-list": "ul"}
_ALIGNMENTS = {"left", "center", "right", "justify"}


@dataclass(slots=True)
class CommandOutcome:
    """Result of a tree mutation.

    ``selection`` overrides where the caret should land afterwards; ``None``
    keeps the selection the caller captured before the command ran.
    """

    tree: DocumentTree
    selection: TextRange | None = None


# ---------------------------------------------------------------------------
# Inline formatting
# ---------------------------------------------------------------------------
def toggle_inline(tree: DocumentTree, selection: TextRange, command: str) -> CommandOutcome:
    """Apply ``bold``/``italic``/``underline``/``strikethrough``, or remove it when already applied."""

    tag, equivalents = INLINE_TAGS[command]
    runs = _isolate_runs(tree, selection)
    if not runs:
        return CommandOutcome(tree)
    if all(_formatted_ancestor(run, equivalents) is not None for run in runs):
        for run in runs:
            ancestor = _formatted_ancestor(run, equivalents)
            while ancestor is not None:
                _lift_out_of(run, ancestor)
                ancestor = _formatted_ancestor(run, equivalents)
        _drop_empty_elements(tree.root)
        return CommandOutcome(tree)
    _wrap_runs([run for run in runs if _formatted_ancestor(run, equivalents) is None], tag, {})
    return CommandOutcome(tree)


def wrap_inline(tree: DocumentTree, selection: TextRange, tag: str, attrs: dict[str, str]) -> CommandOutcome:
    """Wrap the selected text in ``<tag attrs>`` (font size, face or colour)."""

    runs = _isolate_runs(tree, selection)
    if runs:
        _wrap_runs(runs, tag, attrs)
    return CommandOutcome(tree)


def _isolate_runs(tree: DocumentTree, selection: TextRange) -> list[TextRun]:
    """Split runs at the selection edges and return the runs fully inside it."""

    if selection.is_caret:
        return []
    _split_at(tree, selection.end)
    _split_at(tree, selection.start)
    covered: list[TextRun] = []
    consumed = 0
    for run in tree.leaves():
        run_start, run_end = consumed, consumed + len(run.text)
        consumed = run_end
        if run.text and run_start >= selection.start and run_end <= selection.end:
            covered.append(run)
    return covered


def _split_at(tree: DocumentTree, offset: int) -> None:
    consumed = 0
    for run in tree.leaves():
        length = len(run.text)
        if consumed < offset < consumed + length:
            split_run(run, offset - consumed)
            return
        consumed += length


def _wrap_runs(runs: Iterable[TextRun], tag: str, attrs: dict[str, str]) -> None:
    wrapper: Element | None = None
    for run in runs:
        parent = run.parent
        if parent is None:
            continue
        index = parent.index(run)
        if wrapper is not None and wrapper.parent is parent and parent.index(wrapper) == index - 1:
            wrapper.append(run)
            continue
        wrapper = Element(tag, dict(attrs))
        parent.insert(index, wrapper)
        wrapper.append(run)


def _formatted_ancestor(run: TextRun, tags: frozenset[str]) -> Element | None:
    for parent in ancestors(run):
        if parent.parent is None:
            return None
        if parent.tag in tags:
            return parent
    return None


def _lift_out_of(run: TextRun, ancestor: Element) -> None:
    """Move ``run`` out of ``ancestor`` while keeping every wrapper in between.

    Each level between the run and ``ancestor`` is split into the part before
    the run, a shell holding only the run, and the part after it; at the
    ancestor's level the shell is placed beside the ancestor's two halves.
    """

    node: Node = run
    while True:
        parent = node.parent
        assert parent is not None and parent.parent is not None
        grandparent = parent.parent
        position = grandparent.index(parent)
        index = parent.index(node)
        before = Element(parent.tag, dict(parent.attrs))
        after = Element(parent.tag, dict(parent.attrs))
        head, tail = list(parent.children[:index]), list(parent.children[index + 1 :])
        for child in head:
            before.append(child)
        for child in tail:
            after.append(child)
        grandparent.remove(parent)
        if parent is ancestor:
            middle: Node = node
        else:
            middle = Element(parent.tag, dict(parent.attrs))
            middle.append(node)
        pieces = [piece for piece in (before, middle, after) if piece is middle or piece.children]
        for offset, piece in enumerate(pieces):
            grandparent.insert(position + offset, piece)
        if parent is ancestor:
            return
        node = middle


def _drop_empty_elements(element: Element) -> None:
    for child in list(element.children):
        if isinstance(child, Element):
            _drop_empty_elements(child)
            if not child.children and not child.is_void:
                element.remove(child)


# ---------------------------------------------------------------------------
# Block formatting
# ---------------------------------------------------------------------------
def set_alignment(tree: DocumentTree, selection: TextRange, alignment: str) -> CommandOutcome:
    if alignment not in _ALIGNMENTS:
        raise ValueError(f"Unsupported alignment: {alignment}")
    for block in _blocks_for(tree, selection):
        styles = _parse_style(block.attrs.get("style", ""))
        styles["text-align"] = alignment
        block.attrs["style"] = _format_style(styles)
    return CommandOutcome(tree)


def toggle_list(tree: DocumentTree, selection: TextRange, command: str) -> CommandOutcome:
    """Wrap the selected lines in a list, or unwrap them when already listed."""

    list_tag = _LIST_TAGS[command]
    root = tree.root
    blocks = _blocks_for(tree, selection)
    if blocks and all(_enclosing_list(block) is not None for block in blocks):
        lists = _unique(_enclosing_list(block) for block in blocks)
        if all(item.tag == list_tag for item in lists):
            for list_element in lists:
                _unwrap_list(list_element)
            return CommandOutcome(tree, TextRange.caret(len(tree)))
        for list_element in lists:
            list_element.tag = list_tag
        return CommandOutcome(tree, TextRange.caret(len(tree)))

    # Lines already inside another list keep their list.
    blocks = [block for block in blocks if block.parent is root and _enclosing_list(block) is None]
    list_element = Element(list_tag)
    if not blocks and root.children:
        return CommandOutcome(tree, TextRange.caret(len(tree)))
    if not blocks:
        item = Element("li")
        item.append(TextRun(""))
        list_element.append(item)
        root.append(list_element)
        return CommandOutcome(tree, TextRange.caret(len(tree)))
    root.insert(root.index(blocks[0]), list_element)
    for block in blocks:
        item = Element("li", {k: v for k, v in block.attrs.items() if k == "style"})
        for child in list(block.children):
            item.append(child)
        root.remove(block)
        list_element.append(item)
    return CommandOutcome(tree, TextRange.caret(len(tree)))


def _enclosing_list(block: Element) -> Element | None:
    if block.tag == "li" and block.parent is not None and block.parent.tag in ("ul", "ol"):
        return block.parent
    return None


def _unwrap_list(list_element: Element) -> None:
    parent = list_element.parent
    assert parent is not None
    position = parent.index(list_element)
    parent.remove(list_element)
    for offset, item in enumerate(list(list_element.children)):
        if isinstance(item, Element) and item.tag == "li":
            item.tag = "div"
        parent.insert(position + offset, item)


def _blocks_for(tree: DocumentTree, selection: TextRange) -> list[Element]:
    """Return the line-level blocks touched by ``selection``.

    A block is a top-level block element, a list item, or a ``div`` created
    around a run of loose inline content between line boundaries.
    """

    blocks: list[Element] = []
    for run in _runs_touching(tree, selection):
        block = _line_block(tree, run)
        if block is not None and not any(block is seen for seen in blocks):
            blocks.append(block)
    return blocks


def _runs_touching(tree: DocumentTree, selection: TextRange) -> list[TextRun]:
    runs: list[TextRun] = []
    consumed = 0
    leaves = tree.leaves()
    for run in leaves:
        run_start, run_end = consumed, consumed + len(run.text)
        consumed = run_end
        if selection.is_caret:
            if run_start <= selection.start <= run_end:
                runs.append(run)
                break
        elif run_start < selection.end and run_end > selection.start:
            runs.append(run)
    if not runs and leaves:
        runs.append(leaves[-1])
    return runs


def _line_block(tree: DocumentTree, run: TextRun) -> Element | None:
    root = tree.root
    chain = [run, *ancestors(run)]
    for node in chain:
        if isinstance(node, Element) and node.tag == "li":
            return node
    top = next((node for node in chain if node.parent is root), None)
    if top is None:
        return None
    if isinstance(top, Element) and top.is_block:
        return top
    # Loose inline content: gather siblings up to the nearest block or <br>.
    index = root.index(top)
    first = index
    while first > 0 and not _is_line_boundary(root.children[first - 1]):
        first -= 1
    last = index
    while last + 1 < len(root.children) and not _is_line_boundary(root.children[last + 1]):
        last += 1
    wrapper = Element("div")
    members = list(root.children[first : last + 1])
    root.insert(first, wrapper)
    for member in members:
        wrapper.append(member)
    trailing = root.children[first + 1] if first + 1 < len(root.children) else None
    if isinstance(trailing, Element) and trailing.tag == "br":
        root.remove(trailing)
    return wrapper


def _is_line_boundary(node: Node) -> bool:
    return isinstance(node, Element) and (node.is_block or node.tag == "br")


def _parse_style(style: str) -> dict[str, str]:
    declarations: dict[str, str] = {}
    for chunk in style.split(";"):
        if ":" not in chunk:
            continue
        name, value = chunk.split(":", 1)
        if name.strip():
            declarations[name.strip().lower()] = value.strip()
    return declarations


def _format_style(declarations: dict[str, str]) -> str:
    return "; ".join(f"{name}: {value}" for name, value in declarations.items()) + ";"


def _unique(items: Iterable[Element | None]) -> list[Element]:
    unique: list[Element] = []
    for item in items:
        if item is not None and not any(item is seen for seen in unique):
            unique.append(item)
    return unique


# ---------------------------------------------------------------------------
# Insertions
# ---------------------------------------------------------------------------
def insert_line_break(tree: DocumentTree, selection: TextRange) -> CommandOutcome:
    """Insert a ``<br>`` at the selection start."""

    _insert_node(tree, selection.start, Element("br"))
    return CommandOutcome(tree)


def insert_text(tree: DocumentTree, selection: TextRange, text: str) -> CommandOutcome:
    """Replace the selection with plain ``text`` and put the caret after it."""

    if not selection.is_caret:
        _cut(tree, selection)
    consumed = 0
    target: tuple[TextRun, int] | None = None
    for run in tree.leaves():
        if consumed + len(run.text) >= selection.start:
            target = (run, selection.start - consumed)
            break
        consumed += len(run.text)
    if target is None:
        tree.root.append(TextRun(text))
    else:
        run, local = target
        run.text = run.text[:local] + text + run.text[local:]
    caret = selection.start + len(text)
    return CommandOutcome(tree, TextRange.caret(caret))


def _insert_node(tree: DocumentTree, offset: int, node: Node) -> None:
    consumed = 0
    for run in tree.leaves():
        length = len(run.text)
        if consumed + length >= offset:
            local = offset - consumed
            parent = run.parent
            assert parent is not None
            if local == 0:
                parent.insert(parent.index(run), node)
            else:
                split_run(run, local)
                parent.insert(parent.index(run) + 1, node)
            return
        consumed += length
    tree.root.append(node)


def _cut(tree: DocumentTree, selection: TextRange) -> None:
    consumed = 0
    for run in tree.leaves():
        run_start, run_end = consumed, consumed + len(run.text)
        consumed = run_end
        lo, hi = max(selection.start, run_start), min(selection.end, run_end)
        if lo < hi:
            run.text = run.text[: lo - run_start] + run.text[hi - run_start :]
    tree.prune_empty_runs()


# ---------------------------------------------------------------------------
# State queries
# ---------------------------------------------------------------------------
def active_formats(tree: DocumentTree, offset: int) -> set[str]:
    """Return the formats in effect at ``offset`` (the toolbar's active buttons)."""

    consumed = 0
    anchor: TextRun | None = None
    for run in tree.leaves():
        if consumed + len(run.text) >= offset:
            anchor = run
            break
        consumed += len(run.text)
    if anchor is None:
        return {"justify-left"}
    active: set[str] = set()
    alignment: str | None = None
    for parent in ancestors(anchor):
        for name, (_tag, equivalents) in INLINE_TAGS.items():
            if parent.tag in equivalents:
                active.add(name)
        for name, tag in _LIST_TAGS.items():
            if parent.tag == tag:
                active.add(name)
        if alignment is None:
            alignment = _parse_style(parent.attrs.get("style", "")).get("text-align")
    active.add(f"justify-{_alignment_name(alignment)}")
    return active


def _alignment_name(alignment: str | None) -> str:
    if alignment == "justify":
        return "full"
    if alignment in ("center", "right"):
        return alignment
    return "left"
