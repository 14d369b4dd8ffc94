"""Async utilities for bridging blocking HTTP calls to asyncio callers."""

import asyncio
from typing import Any, Callable, TypeVar

T = TypeVar("T")


async def run_sync(
    func: Callable[..., T], *args: Any, **kwargs: Any
) -> T:
    """Run a synchronous function in a thread pool without blocking the event loop.

    This is used to expose the blocking ``requests`` transport as coroutines,
    so a session's debounce timer and listeners keep running while a request
    is in flight.

    Args:
        func: Synchronous function to call
        *args: Positional arguments for func
        **kwargs: Keyword arguments for func

    Returns:
        Result of func(*args, **kwargs)

    Example:
        transport = HttpTransport(config)
        response = await run_sync(transport.fetch_full_state, session_id)
    """
    return await asyncio.to_thread(func, *args, **kwargs)
