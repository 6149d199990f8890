"""Ordered record of the notifications a component emits."""

import logging
from typing import TypeVar

from ..core.models import Notification

logger = logging.getLogger(__name__)

N = TypeVar("N", bound=Notification)


class EventLog:
    """Append-only list of notifications in emission order."""

    def __init__(self, source: str):
        """
        Initialize an empty log.

        Args:
            source: Label used in log messages (usually the emitter's address)
        """
        self.source = source
        self._events: list[Notification] = []

    def emit(self, event: Notification) -> Notification:
        """Record a notification."""
        self._events.append(event)
        logger.debug(f"[{self.source}] {event.kind}: {event.model_dump(exclude={'kind'})}")
        return event

    def events(self) -> list[Notification]:
        """Return all notifications recorded so far."""
        return self._events.copy()

    def of_type(self, event_type: type[N]) -> list[N]:
        """Return recorded notifications of one type, in order."""
        return [e for e in self._events if isinstance(e, event_type)]

    def last(self) -> Notification | None:
        return self._events[-1] if self._events else None

    def clear(self) -> None:
        """Clear the log."""
        self._events.clear()

    def __len__(self) -> int:
        return len(self._events)
