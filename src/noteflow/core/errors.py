"""Exception hierarchy for the note editor core."""

from __future__ import annotations

__all__ = ["NoteflowError", "SuggestionTransportError", "UnknownFormatCommand"]


class NoteflowError(Exception):
    """Base class for errors raised by noteflow."""


class UnknownFormatCommand(NoteflowError, ValueError):
    """Raised when a formatting command name is not recognised."""

    def __init__(self, command: str) -> None:
        super().__init__(f"Unknown format command: {command!r}")
        self.command = command


class SuggestionTransportError(NoteflowError):
    """Raised when the suggestion service cannot be reached or returns garbage."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
