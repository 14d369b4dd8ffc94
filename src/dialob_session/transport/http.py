import logging
import threading
from typing import Any

import requests
from pydantic import ValidationError

from ..config import Config
from ..core.async_utils import run_sync
from ..errors import SyncError
from ..session.models import Action
from ..validators import validate_session_id
from .base import DialobResponse

logger = logging.getLogger(__name__)


class HttpTransport:
    """Blocking ``requests`` client for the session REST API, exposed as
    coroutines.

    Endpoints (relative to ``config.api_url``):

    - ``GET  /{session_id}``: full state.
    - ``POST /{session_id}`` with ``{"rev": N, "actions": [...]}``: update.
    """

    def __init__(self, config: Config):
        self.config = config
        self._thread_local = threading.local()

    @property
    def session(self) -> requests.Session:
        """The ``requests.Session`` of the calling thread."""
        return self._get_session()

    def _get_session(self) -> requests.Session:
        """Get or create a thread-local requests.Session."""
        if not hasattr(self._thread_local, "session"):
            self._thread_local.session = self._create_session()
        return self._thread_local.session

    def _create_session(self) -> requests.Session:
        session = requests.Session()
        if self.config.username:
            session.auth = (self.config.username, self.config.password)
        if self.config.token:
            session.headers["Authorization"] = f"Bearer {self.config.token}"
        session.headers["Accept"] = "application/json"
        session.verify = not self.config.insecure
        return session

    def session_url(self, session_id: str) -> str:
        is_valid, reason = validate_session_id(session_id)
        if not is_valid:
            raise SyncError(reason)
        return f"{self.config.api_url.rstrip('/')}/{session_id}"

    def _request(
        self, method: str, session_id: str, payload: dict | None = None
    ) -> DialobResponse:
        """
        Perform one HTTP round trip and parse the response body.
        """
        url = self.session_url(session_id)
        http = self._get_session()
        try:
            response = http.request(
                method,
                url,
                json=payload,
                timeout=(10, self.config.request_timeout),
            )
            response.raise_for_status()
        except requests.HTTPError as exc:
            status = (
                exc.response.status_code
                if exc.response is not None
                else None
            )
            raise SyncError(
                f"{method} {url} failed with HTTP {status}",
                status_code=status,
            ) from exc
        except requests.RequestException as exc:
            raise SyncError(f"{method} {url} failed: {exc}") from exc

        try:
            return DialobResponse.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise SyncError(
                f"Malformed response from {url}: {exc}",
                status_code=response.status_code,
            ) from exc

    def fetch_full_state(self, session_id: str) -> DialobResponse:
        """
        Get the complete state of a session (blocking).
        """
        return self._request("GET", session_id)

    def post_update(
        self, session_id: str, actions: list[Action], rev: int
    ) -> DialobResponse:
        """
        Send actions for a session at the given revision (blocking).
        """
        payload: dict[str, Any] = {
            "rev": rev,
            "actions": [action.to_wire() for action in actions],
        }
        return self._request("POST", session_id, payload)

    async def get_full_state(self, session_id: str) -> DialobResponse:
        return await run_sync(self.fetch_full_state, session_id)

    async def update(
        self, session_id: str, actions: list[Action], rev: int
    ) -> DialobResponse:
        return await run_sync(self.post_update, session_id, actions, rev)
