"""Plain-text export of a single page."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from .document_tree import DocumentTree, Node, TextRun
from .pages import Page

__all__ = ["ExportedPage", "export_filename", "export_page", "render_plain_text", "write_export"]

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class ExportedPage:
    filename: str
    text: str


def export_filename(page_number: int) -> str:
    """Return the download name for the 1-based ``page_number``."""

    return f"note-page-{int(page_number)}.txt"


def render_plain_text(tree: DocumentTree) -> str:
    """Strip formatting from ``tree``.

    ``<br>`` and block boundaries (``div``, ``p``, list items, ...) become
    newlines; leading and trailing blank lines are dropped.
    """

    parts: list[str] = []
    _render(tree.root, parts, top=True)
    return "".join(parts).strip("\n")


def _render(node: Node, parts: list[str], *, top: bool = False) -> None:
    if isinstance(node, TextRun):
        parts.append(node.text)
        return
    if node.tag == "br":
        parts.append("\n")
        return
    block = node.is_block and not top
    if block:
        _break_line(parts)
    for child in node.children:
        _render(child, parts)
    if block:
        _break_line(parts)


def _break_line(parts: list[str]) -> None:
    if parts and not parts[-1].endswith("\n"):
        parts.append("\n")


def export_page(page: Page, page_number: int) -> ExportedPage:
    """Render ``page`` as plain text alongside its ``note-page-<n>.txt`` filename."""

    tree = DocumentTree.from_html(page.content)
    return ExportedPage(filename=export_filename(page_number), text=render_plain_text(tree))


def write_export(exported: ExportedPage, directory: Path | str) -> Path:
    """Write ``exported`` into ``directory`` and return the file path."""

    target_dir = Path(directory).expanduser()
    target_dir.mkdir(parents=True, exist_ok=True)
    path = target_dir / exported.filename
    tmp_path = path.with_suffix(".tmp")
    tmp_path.write_text(exported.text, encoding="utf-8")
    tmp_path.replace(path)
    LOGGER.info("Exported page to %s", path)
    return path
