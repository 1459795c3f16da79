"""Run toolbar formatting commands without losing the user's selection."""

from __future__ import annotations

import logging
from typing import Callable, Mapping

from ..core.errors import UnknownFormatCommand
from ..core.ranges import TextRange
from . import commands
from .caret import CaretController
from .commands import CommandOutcome
from .document_tree import DocumentTree
from .surface import EditorSurface

__all__ = ["COMMANDS", "FormatCommandWrapper", "normalize_command"]

LOGGER = logging.getLogger(__name__)

BackgroundColorCallback = Callable[[str], None]

COMMANDS: tuple[str, ...] = (
    "bold",
    "italic",
    "underline",
    "strikethrough",
    "font-size",
    "font-name",
    "fore-color",
    "justify-left",
    "justify-center",
    "justify-right",
    "justify-full",
    "ordered-list",
    "unordered-list",
    "line-break",
    "bullet-point",
    "background-color",
)

_ALIASES: Mapping[str, str] = {
    "strikeThrough": "strikethrough",
    "fontSize": "font-size",
    "fontName": "font-name",
    "foreColor": "fore-color",
    "justifyLeft": "justify-left",
    "justifyCenter": "justify-center",
    "justifyRight": "justify-right",
    "justifyFull": "justify-full",
    "insertOrderedList": "ordered-list",
    "insertUnorderedList": "unordered-list",
    "insertLineBreak": "line-break",
    "insertHTML": "line-break",
    "insertBulletPoint": "bullet-point",
    "backgroundColor": "background-color",
    "backColor": "background-color",
    "hiliteColor": "background-color",
}

_LIST_COMMANDS = frozenset({"ordered-list", "unordered-list"})
_FONT_ATTRIBUTES = {"font-size": "size", "font-name": "face", "fore-color": "color"}
_ALIGNMENTS = {
    "justify-left": "left",
    "justify-center": "center",
    "justify-right": "right",
    "justify-full": "justify",
}


def normalize_command(command: str, value: str | None = None) -> str:
    """Return the canonical name for ``command`` or raise :class:`UnknownFormatCommand`."""

    name = _ALIASES.get(command, command)
    if name not in COMMANDS:
        raise UnknownFormatCommand(command)
    if command == "insertHTML" and (value or "").strip().lower() not in ("<br>", "<br/>", "<br />"):
        # Only the line-break flavour of insertHTML is a toolbar command.
        raise UnknownFormatCommand(command)
    if name in _FONT_ATTRIBUTES or name == "background-color":
        if not value:
            raise ValueError(f"{name} requires a value")
    return name


class FormatCommandWrapper:
    """Applies formatting commands to the surface's tree.

    Structural commands run on a copy of the tree which then replaces the
    surface content; the selection captured beforehand as linear offsets is
    restored against the new tree. List commands leave the caret at the end
    of the content instead, and a selection that cannot be restored collapses
    to its start offset. ``background-color`` never touches the tree: it is
    forwarded to ``on_background_color`` for the page to record.
    """

    def __init__(
        self,
        surface: EditorSurface,
        caret: CaretController,
        *,
        on_background_color: BackgroundColorCallback | None = None,
    ) -> None:
        self._surface = surface
        self._caret = caret
        self._on_background_color = on_background_color

    def apply(self, root: DocumentTree, command: str, value: str | None = None) -> DocumentTree:
        name = normalize_command(command, value)
        if name == "background-color":
            assert value is not None
            if self._on_background_color is not None:
                self._on_background_color(value)
            else:
                LOGGER.debug("background-color %s ignored: no page colour callback", value)
            return root

        selection = self._caret.save_selection(root)
        backward = self._caret.is_backward(root)
        if selection is None:
            selection = TextRange.caret(len(root))
        outcome = self._mutate(root.copy(), name, selection, value)
        new_root = outcome.tree
        if self._surface.tree is root:
            self._surface.replace_tree(new_root)
        else:
            LOGGER.debug("Surface content changed underneath %s; result not committed", name)

        target = outcome.selection or selection
        if name in _LIST_COMMANDS:
            target = TextRange.caret(len(new_root))
        if not self._caret.restore_selection(new_root, target, backward=backward and not target.is_caret):
            LOGGER.debug("Selection %s lost after %s; collapsing to its start", target.to_tuple(), name)
            self._caret.restore(new_root, target.start)
        return new_root

    # ------------------------------------------------------------------
    # Command dispatch
    # ------------------------------------------------------------------
    def _mutate(
        self, tree: DocumentTree, name: str, selection: TextRange, value: str | None
    ) -> CommandOutcome:
        if name in commands.INLINE_TAGS:
            return commands.toggle_inline(tree, selection, name)
        if name in _FONT_ATTRIBUTES:
            assert value is not None
            return commands.wrap_inline(tree, selection, "font", {_FONT_ATTRIBUTES[name]: str(value)})
        if name in _ALIGNMENTS:
            return commands.set_alignment(tree, selection, _ALIGNMENTS[name])
        if name in _LIST_COMMANDS:
            return commands.toggle_list(tree, selection, name)
        if name == "line-break":
            return commands.insert_line_break(tree, selection)
        if name == "bullet-point":
            return commands.insert_text(tree, selection, commands.BULLET_TEXT)
        raise UnknownFormatCommand(name)  # pragma: no cover - normalize_command guards this
