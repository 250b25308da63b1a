"""
Presentation lifecycle events.

Mirrors the events a reveal.js host emits (ready, slidechanged) plus the
window resize event, and a small emitter that awaits async listeners.
"""

import inspect
import logging
from collections import defaultdict
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from deck_funnels.deck.markup import Slide

logger = logging.getLogger(__name__)


READY = "ready"
SLIDE_CHANGED = "slidechanged"
RESIZE = "resize"

Listener = Callable[[Any], Awaitable[None] | None]


@dataclass
class ReadyEvent:
    """First slide shown."""

    current_slide: "Slide"
    indexh: int = 0
    indexv: int = 0


@dataclass
class SlideChangedEvent:
    """Navigation occurred."""

    current_slide: "Slide"
    previous_slide: "Slide | None" = None
    indexh: int = 0
    indexv: int = 0


@dataclass
class ResizeEvent:
    """Viewport size changed."""

    width: int
    height: int


class EventEmitter:
    """Named-event listener registry.

    Listeners run in registration order. Coroutine listeners are awaited
    before the next one runs. A failing listener is logged and does not
    stop the others.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = defaultdict(list)

    def add_event_listener(self, name: str, listener: Listener) -> None:
        self._listeners[name].append(listener)

    def remove_event_listener(self, name: str, listener: Listener) -> None:
        if listener in self._listeners.get(name, []):
            self._listeners[name].remove(listener)

    def listener_count(self, name: str) -> int:
        return len(self._listeners.get(name, []))

    async def emit(self, name: str, event: Any) -> None:
        for listener in list(self._listeners.get(name, [])):
            try:
                result = listener(event)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception(f"Listener for '{name}' failed")
