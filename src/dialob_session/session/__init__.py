"""Session state coordination.

Keeps a local snapshot of a remote session, applies actions to it
optimistically and reconciles them with the server.

Modules:

- ``models``      -- ``Action``, ``Item``, ``ValueSet``, ``ErrorRecord``,
  ``SessionState``: core data contracts.
- ``reducer``     -- ``reduce()``: pure, atomic application of an action batch.
- ``events``      -- ``EventNotifier``: ``update`` / ``sync`` / ``error`` fan-out.
- ``scheduler``   -- ``DebouncedScheduler``: pending queue + quiet-period timer.
- ``coordinator`` -- ``SyncCoordinator``: pull / push round trips.
- ``session``     -- ``Session``: the public facade tying it all together.

Usage example
-------------
::

    from dialob_session.session import Session

    async with Session("abc123", transport, debounce=0.5) as session:
        session.on("error", lambda kind, err: print(kind, err))
        await session.pull()
        session.set_answer("q1", "hello")
        await session.flush()
"""

from .coordinator import SyncCoordinator
from .events import ErrorKind, EventNotifier, EventType, SyncStatus
from .models import (
    Action,
    ActionType,
    ErrorRecord,
    Item,
    SessionState,
    ValueSet,
    ValueSetEntry,
)
from .reducer import ReduceResult, empty_state, reduce
from .scheduler import DebouncedScheduler
from .session import Session

__all__ = [
    "Action",
    "ActionType",
    "DebouncedScheduler",
    "ErrorKind",
    "ErrorRecord",
    "EventNotifier",
    "EventType",
    "Item",
    "ReduceResult",
    "Session",
    "SessionState",
    "SyncCoordinator",
    "SyncStatus",
    "ValueSet",
    "ValueSetEntry",
    "empty_state",
    "reduce",
]
