"""Listener fan-out for session events.

Three independent channels:

- ``update``: a reducer transition completed.  No payload.
- ``sync``: a round trip started (``INPROGRESS``) or reconciled (``DONE``).
- ``error``: something failed, classified ``CLIENT`` or ``SYNC``.

Each emit iterates over a copy of the listener list, so a listener may
subscribe or unsubscribe (itself included) while being notified.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    UPDATE = "update"
    SYNC = "sync"
    ERROR = "error"


class SyncStatus(str, Enum):
    INPROGRESS = "INPROGRESS"
    DONE = "DONE"


class ErrorKind(str, Enum):
    CLIENT = "CLIENT"
    SYNC = "SYNC"


Listener = Callable[..., Any]


class EventNotifier:
    """Per-event listener lists with identity-based removal."""

    def __init__(self) -> None:
        self._listeners: dict[EventType, list[Listener]] = {
            event: [] for event in EventType
        }

    def _target(self, event: EventType | str) -> list[Listener]:
        try:
            return self._listeners[EventType(event)]
        except ValueError:
            raise ValueError(f"Unknown event type '{event}'") from None

    def on(self, event: EventType | str, listener: Listener) -> None:
        """Register *listener* for *event*."""
        self._target(event).append(listener)

    def remove_listener(
        self, event: EventType | str, listener: Listener
    ) -> None:
        """Unregister *listener* from *event*.

        Matches by identity.  No-op if the listener is not registered.
        """
        target = self._target(event)
        for idx, registered in enumerate(target):
            if registered is listener:
                del target[idx]
                return

    def listener_count(self, event: EventType | str) -> int:
        return len(self._target(event))

    def emit_update(self) -> None:
        self._emit(EventType.UPDATE)

    def emit_sync(self, status: SyncStatus) -> None:
        self._emit(EventType.SYNC, status)

    def emit_error(self, kind: ErrorKind, error: BaseException) -> None:
        self._emit(EventType.ERROR, kind, error)

    def _emit(self, event: EventType, *args: Any) -> None:
        for listener in list(self._listeners[event]):
            try:
                listener(*args)
            except Exception:
                logger.exception(
                    "Listener %r failed handling '%s' event",
                    listener,
                    event.value,
                )
