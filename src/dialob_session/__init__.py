"""Client-side state coordinator for remote Dialob form sessions."""

__version__ = "0.1.0"

from .errors import ClientError, DialobError, SyncError
from .session import Action, Item, Session, SessionState, ValueSet
from .transport import DialobResponse, HttpTransport, Transport

__all__ = [
    "Action",
    "ClientError",
    "DialobError",
    "DialobResponse",
    "HttpTransport",
    "Item",
    "Session",
    "SessionState",
    "SyncError",
    "Transport",
    "ValueSet",
    "__version__",
]
