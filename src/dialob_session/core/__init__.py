"""Core helpers shared by the transport and the CLI."""

from .async_utils import run_sync

__all__ = ["run_sync"]
