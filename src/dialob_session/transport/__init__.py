"""Transports connecting a session to the remote authority."""

from .base import DialobResponse, Transport
from .http import HttpTransport

__all__ = ["DialobResponse", "HttpTransport", "Transport"]
