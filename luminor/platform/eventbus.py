"""Synchronous in-process event bus keyed by event type."""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from collections.abc import Callable
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

E = TypeVar("E")


class EventHandlerError(Exception):
    """Raised when a subscribed handler fails; the original error is the cause."""

    def __init__(self, event_type: type, error: BaseException) -> None:
        super().__init__(f"handler error for event {event_type.__name__}: {error}")
        self.event_type = event_type
        self.error = error


class EventBus:
    """Dispatches events to the handlers registered for their exact type."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._handlers: dict[type, list[Callable[[Any], None]]] = defaultdict(list)

    def subscribe(
        self, event_type: type[E], handler: Callable[[E], None]
    ) -> Callable[[E], None]:
        """Register a handler for events of the given type and return it."""
        with self._lock:
            self._handlers[event_type].append(handler)
        logger.debug("event subscriber registered: %s", event_type.__name__)
        return handler

    def publish(self, event: object) -> None:
        """Call every handler for the event's type in order; stop at the first failure."""
        event_type = type(event)
        with self._lock:
            handlers = list(self._handlers.get(event_type, ()))
        logger.debug(
            "publishing event %s to %d handlers", event_type.__name__, len(handlers)
        )
        for handler in handlers:
            try:
                handler(event)
            except Exception as err:
                raise EventHandlerError(event_type, err) from err