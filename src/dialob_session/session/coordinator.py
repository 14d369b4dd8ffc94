"""Request/response cycles against the remote session authority.

``SyncCoordinator`` runs the two round trips a session needs:

1. ``pull()`` -- fetch the full state (the server usually leads with a
   ``RESET`` action) and rebuild the snapshot from it.
2. ``push()`` -- send a batch of locally applied actions together with the
   revision the client believes it is at; the server answers with its own
   actions and a new revision, which replace the optimistic effect.

Both cycles emit ``sync INPROGRESS`` before the network call and ``sync DONE``
after reconciliation.  A failure emits an ``error`` event instead and is
re-raised.

Round trips are serialised through a single-slot gate (an ``asyncio.Lock``):
a ``pull()`` issued while a push is in flight waits for it and runs next, so
responses are always applied in the order the requests were made.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Awaitable, Callable

from ..errors import SyncError
from .events import ErrorKind, EventNotifier, SyncStatus
from .models import Action

if TYPE_CHECKING:
    from ..transport.base import DialobResponse, Transport

logger = logging.getLogger(__name__)


def classify_error(error: BaseException) -> ErrorKind:
    """Map an exception onto the ``error`` channel classification."""
    if isinstance(error, SyncError):
        return ErrorKind.SYNC
    return ErrorKind.CLIENT


class SyncCoordinator:
    """Drive pull/push cycles for one session.

    Args:
        session_id: Remote session identifier.
        transport: Transport used for the round trips.
        notifier: Event fan-out for ``sync`` and ``error`` events.
        apply_actions: Applies a response batch with its revision.
        current_rev: Returns the revision of the current snapshot.
    """

    def __init__(
        self,
        session_id: str,
        transport: Transport,
        notifier: EventNotifier,
        apply_actions: Callable[[list[Action], int | None], object],
        current_rev: Callable[[], int],
    ) -> None:
        self.session_id = session_id
        self.transport = transport
        self._notifier = notifier
        self._apply_actions = apply_actions
        self._current_rev = current_rev
        self._gate = asyncio.Lock()

    @property
    def busy(self) -> bool:
        """Whether a round trip currently holds the sync gate."""
        return self._gate.locked()

    async def pull(self) -> DialobResponse:
        """Fetch and apply the full session state.

        Raises:
            SyncError: If the transport call fails.
        """
        async with self._gate:
            logger.debug("Pulling full state for session %s", self.session_id)
            return await self._round_trip(
                lambda: self.transport.get_full_state(self.session_id)
            )

    async def push(
        self, actions: list[Action], rev: int | None = None
    ) -> DialobResponse:
        """Send *actions* and apply the server's answer.

        Args:
            actions: Locally applied actions to confirm.
            rev: Revision to report.  Defaults to the snapshot's revision
                at the moment the gate is acquired.

        Raises:
            SyncError: If the transport call fails.
        """
        async with self._gate:
            base_rev = self._current_rev() if rev is None else rev
            logger.debug(
                "Pushing %d action(s) for session %s at rev %d",
                len(actions),
                self.session_id,
                base_rev,
            )
            return await self._round_trip(
                lambda: self.transport.update(
                    self.session_id, actions, base_rev
                )
            )

    async def _round_trip(
        self, call: Callable[[], Awaitable[DialobResponse]]
    ) -> DialobResponse:
        self._notifier.emit_sync(SyncStatus.INPROGRESS)
        try:
            response = await call()
        except Exception as exc:
            logger.warning(
                "Sync failed for session %s: %s", self.session_id, exc
            )
            self._notifier.emit_error(classify_error(exc), exc)
            raise

        self._apply_actions(response.actions, response.rev)
        logger.debug(
            "Session %s reconciled at rev %d (%d action(s))",
            self.session_id,
            response.rev,
            len(response.actions),
        )
        self._notifier.emit_sync(SyncStatus.DONE)
        return response
