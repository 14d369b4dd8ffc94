"""Transport contract between a session and the remote authority."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from pydantic import BaseModel

from ..session.models import Action


class DialobResponse(BaseModel):
    """Server answer to a full-state or update request.

    Attributes:
        actions: Actions to apply, in order.
        rev: Revision the resulting state corresponds to.
    """

    actions: list[Action] = []
    rev: int

    model_config = {"frozen": True}


@runtime_checkable
class Transport(Protocol):
    """Asynchronous, fallible access to the session authority.

    Implementations raise ``SyncError`` for request failures.
    """

    async def get_full_state(self, session_id: str) -> DialobResponse:
        ...

    async def update(
        self, session_id: str, actions: list[Action], rev: int
    ) -> DialobResponse:
        ...
