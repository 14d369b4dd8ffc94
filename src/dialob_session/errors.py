"""Exception taxonomy for the session client.

- ``DialobError``: base class for everything raised by this package.
- ``ClientError``: a local invariant was violated (unknown action type,
  answer on a missing or non-answerable item).
- ``SyncError``: the transport failed or the server rejected the request.

Server-reported validation problems are *not* exceptions: they arrive as
``ERROR`` actions and accumulate in ``SessionState.errors``.
"""


class DialobError(Exception):
    """Base exception for session client errors."""


class ClientError(DialobError):
    """Raised when a locally applied action breaks a state invariant."""


class SyncError(DialobError):
    """Raised when a transport round trip fails.

    Args:
        message: Human-readable description.
        status_code: HTTP status code when the server answered at all.
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
