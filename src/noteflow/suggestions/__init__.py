"""Word-completion lookup, orchestration and bubble placement."""

from .bubble import BubbleGeometry, BubblePositioner, Point, Rect, Size
from .client import SuggestionClient, SuggestionClientSettings, SuggestionSource
from .orchestrator import KeyEventHub, SuggestionOrchestrator, SuggestionPhase, SuggestionState

__all__ = [
    "BubbleGeometry",
    "BubblePositioner",
    "KeyEventHub",
    "Point",
    "Rect",
    "Size",
    "SuggestionClient",
    "SuggestionClientSettings",
    "SuggestionOrchestrator",
    "SuggestionPhase",
    "SuggestionSource",
    "SuggestionState",
]
