"""Client-side coordinator for one remote session.

``Session`` owns the current ``SessionState`` snapshot and wires together the
reducer, the debounced action queue, the sync coordinator and the event
notifier::

    set_answer() -> Action -> reduce (optimistic) -> queue
                                   |
                      quiet period elapses
                                   v
             push(batch) -> transport.update -> reduce(response, rev)
                                   v
                     "update" then "sync DONE"

All writes go through actions; readers get the snapshot that was current
before or after a whole batch, never one in between.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .coordinator import SyncCoordinator, classify_error
from .events import EventNotifier, EventType, Listener
from .models import Action, ErrorRecord, Item, SessionState, ValueSet
from .reducer import ReduceResult, reduce
from .scheduler import DEFAULT_DEBOUNCE, DebouncedScheduler

if TYPE_CHECKING:
    from ..config import Config
    from ..transport.base import DialobResponse, Transport

logger = logging.getLogger(__name__)


class Session:
    """Local state and sync cycle for one session.

    Args:
        session_id: Remote session identifier.
        transport: Transport used for full-state and update requests.
        debounce: Quiet period in seconds before queued actions are sent.

    Example::

        async with Session("abc123", transport) as session:
            session.on("update", lambda: render(session))
            await session.pull()
            session.set_answer("name", "Ada")
    """

    def __init__(
        self,
        session_id: str,
        transport: Transport,
        *,
        debounce: float = DEFAULT_DEBOUNCE,
    ) -> None:
        self.id = session_id
        self.transport = transport
        self._state = SessionState()
        self._events = EventNotifier()
        self._coordinator = SyncCoordinator(
            session_id,
            transport,
            self._events,
            self.apply_actions,
            lambda: self._state.rev,
        )
        self._scheduler = DebouncedScheduler(self._push_batch, debounce)

    @classmethod
    def from_config(cls, session_id: str, config: Config) -> Session:
        """Build a session talking HTTP to ``config.api_url``."""
        # Imported lazily: the transport package imports session models.
        from ..transport.http import HttpTransport

        return cls(
            session_id,
            HttpTransport(config),
            debounce=config.debounce_seconds,
        )

    async def __aenter__(self) -> Session:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # State logic
    # ------------------------------------------------------------------

    def apply_actions(
        self, actions: list[Action], rev: int | None = None
    ) -> SessionState:
        """Reduce *actions* into a new snapshot and notify listeners.

        Client errors from skipped actions go to the ``error`` listeners as
        ``CLIENT``; ``update`` fires once, after the snapshot is swapped in.
        """
        return self._transition(actions, rev).state

    def _transition(
        self, actions: list[Action], rev: int | None = None
    ) -> ReduceResult:
        result = reduce(self._state, actions, rev)
        self._state = result.state
        for error in result.errors:
            self._events.emit_error(classify_error(error), error)
        self._events.emit_update()
        return result

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        """The current snapshot."""
        return self._state

    @property
    def rev(self) -> int:
        return self._state.rev

    @property
    def locale(self) -> str | None:
        return self._state.locale

    @property
    def errors(self) -> tuple[ErrorRecord, ...]:
        return self._state.errors

    @property
    def pending_actions(self) -> tuple[Action, ...]:
        """Actions applied locally but not yet sent."""
        return self._scheduler.pending

    def get_item(self, item_id: str) -> Item | None:
        return self._state.items.get(item_id)

    def get_value_set(self, value_set_id: str) -> ValueSet | None:
        return self._state.value_sets.get(value_set_id)

    def is_complete(self) -> bool:
        return self._state.complete

    # ------------------------------------------------------------------
    # Syncing
    # ------------------------------------------------------------------

    def enqueue(self, action: Action) -> None:
        """Apply *action* optimistically and queue it for the next flush.

        An action the local reducer rejects is reported on the ``error``
        channel and not sent to the server.
        """
        if self._transition([action]).errors:
            return
        self._scheduler.enqueue(action)

    async def pull(self) -> DialobResponse:
        """Replace the local state with the server's full state.

        Raises:
            SyncError: If the request fails.
        """
        return await self._coordinator.pull()

    async def flush(self) -> DialobResponse | None:
        """Send queued actions now instead of waiting for the quiet period.

        Returns ``None`` when nothing was queued.

        Raises:
            SyncError: If the request fails.
        """
        return await self._scheduler.flush()

    async def aclose(self) -> None:
        """Stop the debounce timer and wait for in-flight pushes.

        Actions still queued are dropped; call ``flush()`` first to send
        them.
        """
        dropped = self._scheduler.sweep()
        if dropped:
            logger.info(
                "Closing session %s with %d unsent action(s)",
                self.id,
                len(dropped),
            )
        await self._scheduler.aclose()

    async def _push_batch(self, actions: list[Action]) -> DialobResponse:
        return await self._coordinator.push(actions)

    # ------------------------------------------------------------------
    # Convenience methods
    # ------------------------------------------------------------------

    def set_answer(self, item_id: str, answer: Any) -> None:
        self.enqueue(Action.answer_to(item_id, answer))

    def complete(self) -> None:
        self.enqueue(Action.complete())

    def next(self) -> None:
        self.enqueue(Action.next())

    def previous(self) -> None:
        self.enqueue(Action.previous())

    # ------------------------------------------------------------------
    # Event listeners
    # ------------------------------------------------------------------

    def on(self, event: EventType | str, listener: Listener) -> None:
        """Subscribe to ``update``, ``sync`` or ``error`` events."""
        self._events.on(event, listener)

    def remove_listener(
        self, event: EventType | str, listener: Listener
    ) -> None:
        self._events.remove_listener(event, listener)
