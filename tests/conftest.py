"""Shared pytest fixtures for dialob-session tests."""

from __future__ import annotations

import pytest
from dotenv import load_dotenv

from dialob_session.config import Config
from dialob_session.session import Action, Item, Session
from dialob_session.transport import DialobResponse

load_dotenv()


class FakeTransport:
    """In-memory transport recording every call.

    Responses are taken from ``responses`` in order; an ``Exception``
    instance in that list is raised instead of returned.  With no scripted
    response left, ``update`` echoes the sent actions at ``rev + 1``.
    """

    def __init__(self, responses=None):
        self.responses = list(responses or [])
        self.full_state_calls: list[str] = []
        self.update_calls: list[tuple[str, list[Action], int]] = []
        self.full_state = DialobResponse(actions=[Action.reset()], rev=1)

    def _next(self, default: DialobResponse) -> DialobResponse:
        if not self.responses:
            return default
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    async def get_full_state(self, session_id: str) -> DialobResponse:
        self.full_state_calls.append(session_id)
        return self._next(self.full_state)

    async def update(
        self, session_id: str, actions: list[Action], rev: int
    ) -> DialobResponse:
        self.update_calls.append((session_id, list(actions), rev))
        return self._next(DialobResponse(actions=list(actions), rev=rev + 1))


@pytest.fixture
def make_transport():
    """Factory for transports with scripted responses."""
    return FakeTransport


@pytest.fixture
def fake_transport():
    return FakeTransport()


@pytest.fixture
def form_actions():
    """A small questionnaire: one page group with a text and a note."""
    return [
        Action.reset(),
        Action.upsert_item(
            Item(id="questionnaire", type="questionnaire", items=("page1",))
        ),
        Action.upsert_item(
            Item(id="page1", type="group", items=("name", "info"))
        ),
        Action.upsert_item(Item(id="name", type="text", value=None)),
        Action.upsert_item(Item(id="info", type="note")),
    ]


@pytest.fixture
def session(fake_transport):
    """Session with a short debounce window for timer tests."""
    return Session("s-1", fake_transport, debounce=0.05)


@pytest.fixture
def mock_config():
    """Create a Config instance for transport tests."""
    return Config(
        api_url="https://forms.example.com/api/session",
        username="testuser",
        password="testpass",
    )
