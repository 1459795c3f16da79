"""Core value types shared by the editor and suggestion layers."""

from .errors import NoteflowError, SuggestionTransportError, UnknownFormatCommand
from .ranges import TextRange

__all__ = ["NoteflowError", "SuggestionTransportError", "TextRange", "UnknownFormatCommand"]
