"""
Event loop: single-threaded, deterministic event processing.

Dispatches events to registered handlers in registration order. A handler
that raises is logged and skipped so the remaining subscribers still run.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from ordersync.events import Event

logger = logging.getLogger(__name__)

Handler = Callable[[Event], None]


class EventLoop:
    """
    Deterministic event loop. Handlers are called in registration order
    for each event. No I/O, pure in-memory processing.
    """

    def __init__(self) -> None:
        self._handlers: list[Handler] = []

    def subscribe(self, handler: Handler) -> None:
        """Register a handler to be called for every event."""
        self._handlers.append(handler)

    def unsubscribe(self, handler: Handler) -> None:
        """Remove a handler. Unknown handlers are ignored."""
        if handler in self._handlers:
            self._handlers.remove(handler)

    def dispatch(self, event: Event) -> None:
        """Process one event through all handlers in order."""
        for h in list(self._handlers):
            try:
                h(event)
            except Exception:  # noqa: BLE001
                logger.exception("Event handler %r failed on %s", h, type(event).__name__)

    def run(self, events: list[Event]) -> None:
        """Process a sequence of events in order (e.g. replaying recorded snapshots)."""
        for event in events:
            self.dispatch(event)
