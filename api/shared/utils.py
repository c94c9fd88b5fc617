"""Request-scoped helpers shared by routers."""
import asyncio
import contextlib
import logging
from typing import Awaitable, TypeVar

from starlette.requests import Request

from api.shared.exceptions import ClientDisconnectedError

logger = logging.getLogger("chat.utils")

T = TypeVar("T")


async def cancel_on_disconnect(
    request: Request, awaitable: Awaitable[T], poll_interval: float = 0.5
) -> T:
    """Await ``awaitable`` but cancel it if the client disconnects first.

    Cancellation propagates into the awaited call (e.g. an in-flight LLM
    request); the request's DB session is closed afterwards, rolling back
    anything uncommitted.
    """
    task = asyncio.ensure_future(awaitable)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=poll_interval)
            if done:
                return task.result()
            if await request.is_disconnected():
                logger.info(f"Client disconnected from {request.url.path}, cancelling")
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task
                raise ClientDisconnectedError()
    finally:
        if not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
