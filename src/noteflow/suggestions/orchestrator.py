"""Debounced, generation-tagged word completion driving the suggestion bubble."""

from __future__ import annotations

import asyncio
import contextlib
import inspect
import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable, List, Optional, Protocol, Sequence, Tuple

from ..editor.words import WordSpan
from .bubble import BUBBLE_SIZE, BubbleGeometry, BubblePositioner, Point, Size
from .client import MAX_SUGGESTIONS, SuggestionSource

__all__ = [
    "DEBOUNCE_MS",
    "DebounceTimer",
    "KeyEventHub",
    "MIN_PREFIX_LENGTH",
    "PendingQuery",
    "SuggestionOrchestrator",
    "SuggestionPhase",
    "SuggestionState",
]

LOGGER = logging.getLogger(__name__)

DEBOUNCE_MS = 200
MIN_PREFIX_LENGTH = 2


class SuggestionPhase(Enum):
    """Lifecycle of a completion round."""

    IDLE = auto()
    DEBOUNCING = auto()
    QUERYING = auto()
    SHOWING = auto()


@dataclass(slots=True, frozen=True)
class SuggestionState:
    """Snapshot of what the bubble should display."""

    visible: bool = False
    items: Tuple[str, ...] = ()
    selected_index: int = -1
    anchor: Point | None = None
    query_word: str = ""


@dataclass(slots=True, frozen=True)
class PendingQuery:
    """A lookup tagged with the generation and prefix it was issued for."""

    generation: int
    prefix: str
    span: WordSpan


class StateListener(Protocol):
    def __call__(self, phase: SuggestionPhase, state: SuggestionState) -> None:  # pragma: no cover - protocol
        ...


KeyHandler = Callable[[str], bool]
CommitCallback = Callable[[WordSpan, str], Any]
GeometryProvider = Callable[[], Optional[BubbleGeometry]]


class DebounceTimer:
    """Single cancellable delayed call; arming it again cancels the previous one."""

    def __init__(
        self,
        delay_ms: float,
        callback: Callable[[], None],
        *,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._delay = max(0.0, float(delay_ms)) / 1000.0
        self._callback = callback
        self._loop = loop
        self._handle: asyncio.TimerHandle | None = None

    @property
    def delay_ms(self) -> float:
        return self._delay * 1000.0

    @property
    def active(self) -> bool:
        return self._handle is not None

    def arm(self) -> None:
        self.cancel()
        loop = self._loop or asyncio.get_running_loop()
        self._handle = loop.call_later(self._delay, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        self._callback()


class KeyEventHub:
    """Dispatches key presses to subscribed handlers until one consumes the key."""

    def __init__(self) -> None:
        self._handlers: List[KeyHandler] = []

    def subscribe(self, handler: KeyHandler) -> Callable[[], None]:
        self._handlers.append(handler)

        def _unsubscribe() -> None:
            with contextlib.suppress(ValueError):
                self._handlers.remove(handler)

        return _unsubscribe

    def dispatch(self, key: str) -> bool:
        for handler in list(self._handlers):
            if handler(key):
                return True
        return False

    def __len__(self) -> int:
        return len(self._handlers)


def _running_loop() -> asyncio.AbstractEventLoop:
    try:
        return asyncio.get_running_loop()
    except RuntimeError as exc:
        raise RuntimeError(
            "SuggestionOrchestrator needs a running event loop or an explicit loop argument"
        ) from exc


@dataclass(slots=True)
class _Round:
    """Mutable bookkeeping for the round currently on screen."""

    span: WordSpan | None = None
    items: List[str] = field(default_factory=list)
    selected_index: int = -1
    anchor: Point | None = None


class SuggestionOrchestrator:
    """Turns word-at-caret updates into suggestion rounds.

    Every qualifying input re-arms the debounce timer and bumps the
    generation counter; when the timer fires a lookup is issued for the
    typed prefix and tagged with that generation. A response only reaches
    the screen if no newer input arrived in the meantime. Keyboard handling
    is subscribed to the key hub only while suggestions are showing.

    Timers and lookups run on ``loop``; without one the orchestrator must be
    created while an event loop is running.
    """

    def __init__(
        self,
        source: SuggestionSource,
        *,
        debounce_ms: float = DEBOUNCE_MS,
        min_prefix_length: int = MIN_PREFIX_LENGTH,
        max_suggestions: int = MAX_SUGGESTIONS,
        key_hub: KeyEventHub | None = None,
        positioner: BubblePositioner | None = None,
        bubble_size: Size = BUBBLE_SIZE,
        geometry: GeometryProvider | None = None,
        on_commit: CommitCallback | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._source = source
        self._min_prefix_length = max(1, int(min_prefix_length))
        self._max_suggestions = max(1, int(max_suggestions))
        self._key_hub = key_hub if key_hub is not None else KeyEventHub()
        self._positioner = positioner or BubblePositioner()
        self._bubble_size = bubble_size
        self._geometry = geometry
        self._on_commit = on_commit
        self._loop = loop if loop is not None else _running_loop()
        self._timer = DebounceTimer(debounce_ms, self._on_timer_fired, loop=self._loop)
        self._phase = SuggestionPhase.IDLE
        self._generation = 0
        self._pending: PendingQuery | None = None
        self._round = _Round()
        self._tasks: set[asyncio.Task[None]] = set()
        self._unsubscribe_keys: Callable[[], None] | None = None
        self._listeners: List[StateListener] = []
        self._closed = False

    # ------------------------------------------------------------------
    # Public state
    # ------------------------------------------------------------------
    @property
    def phase(self) -> SuggestionPhase:
        return self._phase

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def key_hub(self) -> KeyEventHub:
        return self._key_hub

    @property
    def state(self) -> SuggestionState:
        showing = self._phase is SuggestionPhase.SHOWING
        return SuggestionState(
            visible=showing,
            items=tuple(self._round.items) if showing else (),
            selected_index=self._round.selected_index if showing else -1,
            anchor=self._round.anchor if showing else None,
            query_word=self._pending.prefix if self._pending is not None else "",
        )

    def add_listener(self, listener: StateListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: StateListener) -> None:
        with contextlib.suppress(ValueError):
            self._listeners.remove(listener)

    def set_commit_callback(self, callback: CommitCallback | None) -> None:
        self._on_commit = callback

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------
    def on_input(self, span: WordSpan) -> None:
        """React to the word at the caret after a keystroke."""

        if self._closed:
            return
        prefix = span.typed_prefix
        self._generation += 1
        if len(prefix) < self._min_prefix_length:
            self._timer.cancel()
            self._pending = None
            self._enter_idle()
            return
        self._pending = PendingQuery(generation=self._generation, prefix=prefix.lower(), span=span)
        self._hide()
        self._timer.arm()
        self._set_phase(SuggestionPhase.DEBOUNCING)

    def cancel(self) -> None:
        """Drop any pending or displayed round (caret moved away, page switched, ...)."""

        self._generation += 1
        self._timer.cancel()
        self._pending = None
        self._enter_idle()

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------
    def _on_timer_fired(self) -> None:
        pending = self._pending
        if pending is None or self._closed:
            return
        self._set_phase(SuggestionPhase.QUERYING)
        task = self._loop.create_task(self._run_query(pending))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run_query(self, pending: PendingQuery) -> None:
        try:
            results = await self._source.suggest(pending.prefix)
        except Exception as exc:  # lookups never surface errors to the editor
            LOGGER.warning("Suggestion lookup for %r failed: %s", pending.prefix, exc)
            results = []
        if pending.generation != self._generation or self._closed:
            LOGGER.debug(
                "Discarding stale suggestions for %r (generation %s, current %s)",
                pending.prefix,
                pending.generation,
                self._generation,
            )
            return
        items = [item for item in results if isinstance(item, str)][: self._max_suggestions]
        if not items:
            LOGGER.debug("No suggestions for %r", pending.prefix)
            self._enter_idle()
            return
        self._show(pending.span, items)

    # ------------------------------------------------------------------
    # Showing
    # ------------------------------------------------------------------
    def _show(self, span: WordSpan, items: Sequence[str]) -> None:
        anchor = None
        geometry = self._geometry() if self._geometry is not None else None
        if geometry is not None:
            anchor = self._positioner.anchor_for(geometry, self._bubble_size)
        self._round = _Round(span=span, items=list(items), selected_index=-1, anchor=anchor)
        if self._unsubscribe_keys is None:
            self._unsubscribe_keys = self._key_hub.subscribe(self.handle_key)
        self._set_phase(SuggestionPhase.SHOWING)

    def handle_key(self, key: str) -> bool:
        """Handle navigation keys while showing; returns ``True`` when the key was consumed."""

        if self._phase is not SuggestionPhase.SHOWING or not self._round.items:
            return False
        count = len(self._round.items)
        current = self._round.selected_index
        if key == "ArrowDown":
            self._round.selected_index = current + 1 if current < count - 1 else 0
            self._notify_listeners()
            return True
        if key == "ArrowUp":
            self._round.selected_index = current - 1 if current > 0 else count - 1
            self._notify_listeners()
            return True
        if key in ("Enter", "Tab"):
            self.commit(current if current >= 0 else 0)
            return True
        if key == "Escape":
            self.dismiss()
            return True
        return False

    def hover(self, index: int) -> None:
        if self._phase is SuggestionPhase.SHOWING and 0 <= index < len(self._round.items):
            self._round.selected_index = index
            self._notify_listeners()

    def click(self, index: int) -> Any:
        if self._phase is not SuggestionPhase.SHOWING or not 0 <= index < len(self._round.items):
            return None
        return self.commit(index)

    def commit(self, index: int) -> Any:
        """Hand ``items[index]`` to the commit callback and return to idle."""

        span = self._round.span
        word = self._round.items[index]
        self._generation += 1
        self._pending = None
        self._enter_idle()
        if self._on_commit is None or span is None:
            LOGGER.debug("Suggestion %r chosen but no commit callback is attached", word)
            return None
        return self._on_commit(span, word)

    def dismiss(self) -> None:
        self._generation += 1
        self._pending = None
        self._enter_idle()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._timer.cancel()
        self._enter_idle()
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        close = getattr(self._source, "aclose", None)
        if close is not None:
            result = close()
            if inspect.isawaitable(result):
                await result

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _enter_idle(self) -> None:
        self._hide()
        self._set_phase(SuggestionPhase.IDLE)

    def _hide(self) -> None:
        self._round = _Round()
        if self._unsubscribe_keys is not None:
            self._unsubscribe_keys()
            self._unsubscribe_keys = None

    def _set_phase(self, phase: SuggestionPhase) -> None:
        previous = self._phase
        self._phase = phase
        if previous is not phase or phase is SuggestionPhase.SHOWING:
            self._notify_listeners()

    def _notify_listeners(self) -> None:
        phase, state = self._phase, self.state
        for listener in list(self._listeners):
            listener(phase, state)
